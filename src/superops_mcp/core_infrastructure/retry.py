from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from superops_mcp.core_infrastructure.errors import APIError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_DELAYS_MS: tuple[int, ...] = (1000, 2000, 4000)


def is_retryable_error(exc: BaseException) -> bool:
    """Only classified API errors (429 / 5xx) are worth another attempt."""
    return isinstance(exc, APIError) and exc.is_retryable


@dataclass(frozen=True)
class RetryPolicy:
    """
    Exponential backoff around a single-attempt coroutine factory.

    Sleeps happen only between attempts, never after the last one. A failure
    the predicate rejects propagates immediately; on exhaustion the last
    failure is re-raised unchanged.
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    delays_ms: tuple[int, ...] = DEFAULT_DELAYS_MS
    retryable: Callable[[BaseException], bool] = is_retryable_error
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    def delay_for(self, attempt_index: int) -> float:
        """Seconds to wait after the zero-based failed attempt `attempt_index`."""
        if not self.delays_ms:
            return 0.0
        idx = min(max(attempt_index, 0), len(self.delays_ms) - 1)
        return self.delays_ms[idx] / 1000.0

    async def run(self, fn: Callable[[], Awaitable[T]]) -> T:
        attempts = max(1, int(self.max_attempts))
        for attempt in range(attempts):
            try:
                return await fn()
            except Exception as e:
                if not self.retryable(e):
                    raise
                if attempt >= attempts - 1:
                    logger.warning("Giving up after %s attempts: %s", attempts, e)
                    raise

                delay = self.delay_for(attempt)
                logger.warning(
                    "Retryable failure (attempt %s/%s), retrying in %sms: %s",
                    attempt + 1,
                    attempts,
                    int(delay * 1000),
                    e,
                )
                await self.sleep(delay)

        raise AssertionError("unreachable")  # pragma: no cover
