"""
Smoke script for MCP reachability against a SuperOps tenant.

It performs:
 1) spawns the server module over stdio and lists its tools
 2) calls healthz (effective region / endpoint / read-only mode)
 3) calls search_superops_api (offline, no credentials needed)
 4) calls get_statuses, a cheap read-only API round trip, when
    SUPEROPS_API_KEY and SUPEROPS_SUBDOMAIN are set
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any

from mcp import ClientSession
from mcp.client.stdio import StdioServerParameters, stdio_client

_REPO_ROOT = Path(__file__).resolve().parents[1]


def _pretty(x: Any) -> str:
    try:
        return json.dumps(x, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(x)


def _unwrap_tool_result(res: Any) -> Any:
    structured = getattr(res, "structuredContent", None)
    if isinstance(structured, dict):
        return structured
    content = getattr(res, "content", None)
    if not content:
        return res
    text = getattr(content[0], "text", None)
    if isinstance(text, str) and text.strip().startswith("{"):
        return json.loads(text)
    return text


async def _call(session: ClientSession, tool: str, args: dict[str, Any]) -> dict | None:
    res = await session.call_tool(tool, args)
    out = _unwrap_tool_result(res)
    print(f"\n[smoke] CALL {tool}({args}):")
    print(_pretty(out))
    return out if isinstance(out, dict) else None


async def main() -> int:
    module = os.getenv("MSP_SERVER_MODULE", "superops_mcp.server")
    python_cmd = os.getenv("MCP_PYTHON") or sys.executable

    print(f"[smoke] Repo root: {_REPO_ROOT}")
    print(f"[smoke] Server module: {module}")
    print(f"[smoke] Python: {python_cmd}")

    env = dict(os.environ, MCP_TRANSPORT="stdio")
    env["PYTHONPATH"] = os.pathsep.join(p for p in (str(_REPO_ROOT / "src"), env.get("PYTHONPATH")) if p)
    server = StdioServerParameters(command=python_cmd, args=["-m", module], env=env)

    ok = True
    async with stdio_client(server) as (read, write):
        async with ClientSession(read, write) as session:
            await session.initialize()

            tools = await session.list_tools()
            print(f"\n[smoke] {len(tools.tools)} TOOLS:")
            for t in tools.tools:
                print(f" - {t.name}")

            health = await _call(session, "healthz", {})
            have_credentials = bool(health and health.get("ok") is True)
            if not have_credentials:
                print("[smoke] WARN: healthz did not return {'ok': True}; API calls skipped")

            found = await _call(session, "search_superops_api", {"query": "ticket"})
            if not (found and found.get("totalResults")):
                print("[smoke] WARN: API reference search returned nothing")
                ok = False

            if have_credentials:
                statuses = await _call(session, "get_statuses", {})
                if not statuses or "error" in statuses:
                    ok = False

    print("\n[smoke] OK" if ok else "\n[smoke] Completed with warnings")
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
