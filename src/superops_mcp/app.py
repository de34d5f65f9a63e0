"""
Shared FastMCP application object and tool registration helpers.

Tool modules register themselves on `mcp` through `msp_tool()`; they reach
the API through `get_client()`, which builds the SuperOpsClient from the
environment on first use (so the server can start and list tools without
credentials) and can be replaced with `set_client()`.
"""
import inspect
import logging
import os
from typing import Any, Callable, ParamSpec, TypeVar

from mcp.server.fastmcp import FastMCP

from msp_common.errors import typed_error
from msp_common.tooling import InstrumentConfig, instrument_async_tool
from msp_config.settings import load_client_config
from superops_mcp import __version__
from superops_mcp.core_infrastructure import (
    APIError,
    ConfigurationError,
    InvalidResponseError,
    ReadOnlyViolation,
    RequestTimeoutError,
    SuperOpsClient,
    TransportError,
)

logger = logging.getLogger(__name__)

SERVER_NAME = "SuperOps-MSP"
SERVER_VERSION = __version__
MCP_CLIENT_ID = os.getenv("MCP_CLIENT_ID", "superops-msp")

mcp = FastMCP(
    name=SERVER_NAME,
    instructions=(
        "Use this server to work with a SuperOps MSP tenant: tickets, clients, contacts, sites, "
        "contracts, alerts, assets and reference lookups (statuses, priorities, technicians...). "
        "Call the lookup tools first to discover valid values, and search_superops_api to explore "
        "the underlying GraphQL API."
    ),
)

P = ParamSpec("P")
R = TypeVar("R")

_client: Any = None


def get_client() -> SuperOpsClient:
    """Return the process-wide client, building it from the environment on first use."""
    global _client
    if _client is None:
        config = load_client_config()
        _client = SuperOpsClient(config)
        logger.info("SuperOps client ready (endpoint=%s, read_only=%s)", config.endpoint, config.read_only)
    return _client


def set_client(client: Any) -> None:
    """Install (or with None, drop) the client used by every tool."""
    global _client
    _client = client


def error_payload(exc: Exception) -> dict:
    """Render a failure as the user-facing tool error envelope."""
    if isinstance(exc, APIError):
        details = {"status": exc.status}
        if exc.is_auth_error:
            return typed_error(
                "auth_error",
                "Authentication failed. Check SUPEROPS_API_KEY and SUPEROPS_SUBDOMAIN.",
                details=details,
            )
        if exc.is_rate_limited:
            return typed_error(
                "rate_limited",
                "Rate limit exceeded. Please wait a moment and try again.",
                details=details,
            )
        if exc.is_graphql_error:
            return typed_error("graphql_error", exc.message, details=details)
        return typed_error("api_error", f"API error ({exc.status}): {exc.message}", details=details)

    if isinstance(exc, ReadOnlyViolation):
        return typed_error("read_only", str(exc))
    if isinstance(exc, RequestTimeoutError):
        return typed_error("timeout", str(exc), details={"timeout_ms": exc.timeout_ms})
    if isinstance(exc, InvalidResponseError):
        return typed_error("invalid_response", str(exc), details={"status": exc.status})
    if isinstance(exc, TransportError):
        return typed_error("upstream_unreachable", f"Could not reach SuperOps: {exc}")
    if isinstance(exc, ConfigurationError):
        return typed_error("config_error", str(exc))

    logger.exception("Unexpected tool failure")
    return typed_error("internal", str(exc) or type(exc).__name__)


def _cfg(tool_name: str) -> InstrumentConfig:
    return InstrumentConfig(
        kind="tool",
        name=tool_name,
        client_id=MCP_CLIENT_ID,
        new_corr_id_per_call=True,
        error_payload=error_payload,
    )


def msp_tool(name: str, *, instrument: bool = True):
    """
    Registers an MCP tool and applies instrumentation.
    Keeps tool signature stable for MCP schema generation.
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        sig = inspect.signature(fn)

        wrapped = instrument_async_tool(_cfg(name))(fn) if instrument else fn

        registered = mcp.tool(name=name)(wrapped)
        registered.__signature__ = sig  # type: ignore[attr-defined]
        return registered

    return decorator
