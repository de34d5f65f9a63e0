"""
SuperOps MSP GraphQL client.

Goals:
- Bearer token authentication against the regional `/msp` endpoint.
- One HTTP round trip per attempt, each bounded by its own asyncio timer.
- Retries only for classified retryable failures (429 / 5xx), via RetryPolicy.
- Read-only mode that refuses mutations before any network activity.
- GraphQL errors returned with a 200 status are failures, not successes.

The client holds nothing but its immutable configuration, so one instance
can serve concurrent `execute()` calls without locking.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import time
from typing import Any, Mapping

import httpx

from superops_mcp.core_infrastructure.config import USER_AGENT, ClientConfig
from superops_mcp.core_infrastructure.errors import (
    APIError,
    ConfigurationError,
    InvalidResponseError,
    ReadOnlyViolation,
    RequestContext,
    RequestTimeoutError,
    TransportError,
)
from superops_mcp.core_infrastructure.retry import RetryPolicy

logger = logging.getLogger(__name__)

_OPERATION_NAME_RE = re.compile(r"^\s*(?:query|mutation)\s+([_A-Za-z][_0-9A-Za-z]*)", re.IGNORECASE)


def is_mutation(operation: str) -> bool:
    """
    Lexical check on the first non-whitespace token.

    Not a parse: a document starting with a comment or a shorthand `{ ... }`
    query is not recognised as a mutation.
    """
    return (operation or "").strip().lower().startswith("mutation")


def operation_name(operation: str) -> str:
    m = _OPERATION_NAME_RE.match(operation or "")
    return m.group(1) if m else "anonymous"


class SuperOpsClient:
    """Executes one GraphQL operation per call against the SuperOps MSP API."""

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        if not isinstance(config, ClientConfig):
            raise ConfigurationError("A ClientConfig is required")
        self.config = config
        self.retry_policy = retry_policy or RetryPolicy()
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return self.config.endpoint

    @property
    def read_only(self) -> bool:
        return self.config.read_only

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
            "CustomerSubDomain": self.config.subdomain,
            "User-Agent": USER_AGENT,
        }

    async def execute(self, operation: str, variables: Mapping[str, Any] | None = None) -> Any:
        """
        Run `operation` and return the `data` member of the response.

        Raises ReadOnlyViolation, InvalidResponseError, RequestTimeoutError,
        TransportError or APIError. Only retryable APIErrors are re-attempted.
        """
        if self.config.read_only and is_mutation(operation):
            raise ReadOnlyViolation()

        variables = dict(variables or {})
        context = RequestContext(operation=operation, variables=variables, endpoint=self.endpoint)
        content = json.dumps({"query": operation, "variables": variables})

        # httpx timeouts stay disabled: the per-attempt timer is the only cancellation source
        async with httpx.AsyncClient(transport=self._transport, timeout=None) as http:
            return await self.retry_policy.run(lambda: self._attempt(http, content, context))

    async def _attempt(self, http: httpx.AsyncClient, content: str, context: RequestContext) -> Any:
        name = operation_name(context.operation)
        t0 = time.perf_counter()

        try:
            async with asyncio.timeout(self.config.timeout_seconds):
                response = await http.post(self.endpoint, content=content, headers=self._headers())
        except TimeoutError as e:
            logger.warning("SuperOps %s timed out after %sms", name, self.config.timeout_ms)
            raise RequestTimeoutError(self.config.timeout_ms) from e
        except httpx.HTTPError as e:
            ms = int((time.perf_counter() - t0) * 1000)
            logger.warning("SuperOps %s transport failure (ms=%s): %s", name, ms, e)
            raise TransportError(f"{type(e).__name__}: {e}") from e

        ms = int((time.perf_counter() - t0) * 1000)
        logger.debug("SuperOps %s -> HTTP %s (ms=%s)", name, response.status_code, ms)

        raw_text = response.text
        try:
            body = json.loads(raw_text)
        except ValueError as e:
            raise InvalidResponseError(response.status_code, raw_text) from e

        if not response.is_success:
            raise APIError(response.status_code, body, context)

        if isinstance(body, dict):
            errors = body.get("errors")
            if isinstance(errors, list) and errors:
                raise APIError(200, errors, context)
            return body.get("data")

        return None

    def __repr__(self) -> str:
        return f"SuperOpsClient(endpoint={self.endpoint!r}, read_only={self.read_only!r})"
