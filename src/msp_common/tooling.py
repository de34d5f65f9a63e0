from __future__ import annotations

import functools
import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from msp_common.context import get_request_id, request_scope
from msp_common.errors import REDACT_TOKEN, is_error_payload, typed_error
from msp_common.telemetry import log_event

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Shared helpers for MCP tool handlers
# ---------------------------------------------------------------------------


_REDACTION_KEYS = {"authorization", "token", "access_token", "api_key", "apikey", "password"}


def sanitize_args_for_log(args: dict | None) -> dict:
    """Remove obvious secrets from args (telemetry layer also redacts)."""
    out: dict[str, Any] = {}
    for k, v in (args or {}).items():
        out[str(k)] = REDACT_TOKEN if str(k).lower() in _REDACTION_KEYS else v
    return out


def default_error_payload(exc: Exception) -> dict:
    return typed_error("internal", str(exc) or type(exc).__name__)


@dataclass(frozen=True)
class InstrumentConfig:
    kind: str
    name: str
    client_id: str
    telemetry_file: str = "mcp-telemetry.jsonl"

    # correlation id behavior
    new_corr_id_per_call: bool = True

    # attach corr_id to returned dict for debugging
    attach_corr_id: bool = True

    # turns an exception raised by the tool into an error envelope
    error_payload: Callable[[Exception], dict] = default_error_payload


def instrument_async_tool(cfg: InstrumentConfig):
    """Decorator for async MCP tools: corr id, error envelope, telemetry."""

    def decorator(fn: Callable[..., Awaitable[Any]]):
        fn_sig = inspect.signature(fn)

        async def run(corr_id: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
            t0 = time.perf_counter()

            bound = fn_sig.bind_partial(*args, **kwargs)
            bound.apply_defaults()
            args_for_log: dict[str, Any] = {"args": sanitize_args_for_log(dict(bound.arguments))}

            try:
                payload = await fn(*args, **kwargs)
            except Exception as e:
                logger.info("Tool %s failed: %s: %s", cfg.name, type(e).__name__, e)
                payload = cfg.error_payload(e)

            ms = int((time.perf_counter() - t0) * 1000)
            ok = not is_error_payload(payload)
            if not ok:
                args_for_log["error"] = payload.get("error")

            log_event(
                cfg.kind,
                cfg.name,
                args_for_log,
                ok=ok,
                ms=ms,
                client_id=cfg.client_id,
                corr_id=corr_id,
                telemetry_file=cfg.telemetry_file,
            )

            if cfg.attach_corr_id and isinstance(payload, dict):
                payload.setdefault("corr_id", corr_id)
            return payload

        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any):
            if cfg.new_corr_id_per_call:
                with request_scope() as corr_id:
                    return await run(corr_id, args, kwargs)
            return await run(get_request_id(), args, kwargs)

        # Preserve signature for schema generation
        wrapper.__signature__ = fn_sig  # type: ignore[attr-defined]
        return wrapper

    return decorator
