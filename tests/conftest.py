from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio

from superops_mcp import app as msp_app
from tests.helpers.fake_client import FakeSuperOpsClient
from tests.helpers.mcp_runtime import build_test_env, mcp_stdio_session


@pytest.fixture(autouse=True)
def _isolated_runtime(tmp_path, monkeypatch):
    """Keep telemetry out of the repo and start every test without a cached client."""
    monkeypatch.setenv("MSP_TELEMETRY_DIR", str(tmp_path / "telemetry"))
    monkeypatch.delenv("MSP_DISABLE_TELEMETRY", raising=False)
    msp_app.set_client(None)
    yield
    msp_app.set_client(None)


@pytest.fixture
def fake_client():
    """A FakeSuperOpsClient installed as the client every tool uses."""
    client = FakeSuperOpsClient()
    msp_app.set_client(client)
    return client


@pytest_asyncio.fixture
async def server_session(tmp_path):
    """Initialized session for the SuperOps MSP MCP server (stdio transport)."""
    env = build_test_env(tmp_path)
    # pytest-asyncio runs fixture setup and teardown in different tasks, but the
    # stdio client's cancel scope must be exited by the task that entered it, so
    # a single background task owns the session context for its whole lifetime.
    ready: asyncio.Future = asyncio.get_running_loop().create_future()
    done = asyncio.Event()

    async def _run() -> None:
        try:
            async with mcp_stdio_session(env=env) as session:
                ready.set_result(session)
                await done.wait()
        except BaseException as exc:
            if not ready.done():
                ready.set_exception(exc)
            raise

    task = asyncio.create_task(_run())
    session = await ready
    try:
        yield session
    finally:
        done.set()
        await task
