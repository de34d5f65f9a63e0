"""
Error taxonomy for the SuperOps GraphQL client.

`APIError` is a fixed-shape record (status, body, context) whose message and
classification are derived once, at construction, by the pure functions
`format_message()` and `classify()`. Nothing here performs I/O and nothing
here raises while building an error, whatever the upstream sent back.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping


class SuperOpsError(Exception):
    """Base class for every failure surfaced by the SuperOps client."""


class ConfigurationError(SuperOpsError, ValueError):
    """Missing or empty credential/subdomain. Fatal, never retried."""


class ReadOnlyViolation(SuperOpsError):
    """A mutation was attempted while the client is in read-only mode."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Mutations are disabled in read-only mode. Set SUPEROPS_READ_ONLY=false to enable mutations."
        )


class InvalidResponseError(SuperOpsError):
    """The response body could not be parsed as JSON."""

    def __init__(self, status: int, raw_text: str) -> None:
        self.status = status
        self.excerpt = (raw_text or "")[:200]
        super().__init__(f"Invalid JSON response (HTTP {status}): {self.excerpt}")


class RequestTimeoutError(SuperOpsError, TimeoutError):
    """The per-attempt timer fired before the response arrived."""

    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(f"Request timed out after {timeout_ms}ms")


class TransportError(SuperOpsError):
    """Connection-level failure raised by the HTTP stack (DNS, TLS, reset...)."""


@dataclass(frozen=True)
class RequestContext:
    """Call context kept on errors for diagnostics only."""

    operation: str
    variables: Mapping[str, Any] = field(default_factory=dict)
    endpoint: str = ""


@dataclass(frozen=True)
class ErrorClassification:
    rate_limited: bool
    auth_error: bool
    server_error: bool
    graphql_error: bool
    retryable: bool


def classify(status: int, body: Any) -> ErrorClassification:
    rate_limited = status == 429
    server_error = status >= 500
    return ErrorClassification(
        rate_limited=rate_limited,
        auth_error=status in (401, 403),
        server_error=server_error,
        graphql_error=status == 200 and isinstance(body, list),
        retryable=rate_limited or server_error,
    )


def _client_error_lines(entry: Any) -> list[str]:
    # SuperOps sometimes returns message=null with details in extensions.clientError
    if not isinstance(entry, Mapping):
        return []
    extensions = entry.get("extensions")
    if not isinstance(extensions, Mapping):
        return []
    client_errors = extensions.get("clientError")
    if not isinstance(client_errors, list):
        return []

    lines: list[str] = []
    for ce in client_errors:
        if not isinstance(ce, Mapping):
            continue
        param = ce.get("param")
        attributes = param.get("attributes") if isinstance(param, Mapping) else None
        if isinstance(attributes, list) and attributes:
            detail = ", ".join(str(a) for a in attributes)
        else:
            detail = "unknown"
        lines.append(f"{ce.get('code')}: {detail}")
    return lines


def format_message(status: int, body: Any) -> str:
    """
    Best-effort human-readable message for a failed call.

    GraphQL error arrays (status 200) prefer the `message` fields, then the
    `extensions.clientError` details, then a pretty JSON dump of the array.
    Everything else is reported as `HTTP <status>: <reason>`.
    """
    if status == 200 and isinstance(body, list):
        messages = [
            str(e["message"])
            for e in body
            if isinstance(e, Mapping) and e.get("message")
        ]
        if messages:
            return "; ".join(messages)

        client_errors = [line for e in body for line in _client_error_lines(e)]
        if client_errors:
            return "; ".join(client_errors)

        return json.dumps(body, indent=2, default=str)

    reason = None
    if isinstance(body, Mapping):
        reason = body.get("message") or body.get("error")
    return f"HTTP {status}: {reason or 'Request failed'}"


class APIError(SuperOpsError):
    """A classified upstream failure: HTTP error status or GraphQL error array."""

    def __init__(self, status: int, body: Any, context: RequestContext | None = None) -> None:
        self.status = status
        self.body = body
        self.context = context
        self.message = format_message(status, body)
        self.classification = classify(status, body)
        super().__init__(self.message)

    @property
    def is_rate_limited(self) -> bool:
        return self.classification.rate_limited

    @property
    def is_auth_error(self) -> bool:
        return self.classification.auth_error

    @property
    def is_server_error(self) -> bool:
        return self.classification.server_error

    @property
    def is_graphql_error(self) -> bool:
        return self.classification.graphql_error

    @property
    def is_retryable(self) -> bool:
        return self.classification.retryable

    def __repr__(self) -> str:
        return f"APIError(status={self.status!r}, message={self.message!r})"
