"""
Tool error envelope.

Every tool failure reaches the MCP client as
  {"error": {"code": ..., "message": ..., "details": {...}}, ...extra}
so callers branch on `error.code` instead of parsing text.
"""
from __future__ import annotations

from typing import Any

REDACT_TOKEN = "***redacted***"


def typed_error(code: str, message: str, *, details: dict | None = None, **extra: Any) -> dict:
    err: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        err["error"]["details"] = details
    if extra:
        err.update(extra)
    return err


def is_error_payload(payload: Any) -> bool:
    return isinstance(payload, dict) and isinstance(payload.get("error"), dict)


def error_code(payload: Any) -> str | None:
    """The envelope's code, or None for a successful payload."""
    if not is_error_payload(payload):
        return None
    return payload["error"].get("code")
