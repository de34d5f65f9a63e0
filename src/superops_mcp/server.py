"""
SuperOps MSP MCP server entrypoint.

Importing this module registers every tool on the shared FastMCP app.
"""
import os

from msp_common.telemetry import telemetry_recent as _telemetry_recent
from msp_config.settings import init_runtime, load_client_config
from superops_mcp.app import SERVER_NAME, SERVER_VERSION, error_payload, mcp, msp_tool
from superops_mcp.core_infrastructure import ConfigurationError

# tool registration happens at import time
from superops_mcp import reference  # noqa: F401
from superops_mcp.tools import alerts, assets, clients, lookups, tickets  # noqa: F401


@msp_tool("healthz")
async def healthz() -> dict:
    """Server health and the effective API target. Never reports credentials."""
    try:
        config = load_client_config()
    except ConfigurationError as e:
        return error_payload(e)
    return {
        "ok": True,
        "server": SERVER_NAME,
        "version": SERVER_VERSION,
        "region": config.region,
        "read_only": config.read_only,
        "endpoint": config.endpoint,
    }


# payload already redacted on read
@msp_tool("telemetry_recent")
async def telemetry_recent(n: int = 50) -> dict:
    """Most recent tool-call telemetry records (1 to 200), with secrets and personal data redacted."""
    return _telemetry_recent(n=n)


def main() -> None:
    # Entry points (console_scripts) call main() directly, so we must perform
    # runtime initialization here (dotenv + logging).
    init_runtime()
    transport = os.environ.get("MCP_TRANSPORT", "stdio")
    mcp.run(transport=transport)


if __name__ == "__main__":
    main()
