from __future__ import annotations

import logging
import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from superops_mcp.core_infrastructure.config import DEFAULT_REGION, DEFAULT_TIMEOUT_MS, ClientConfig

_TRUTHY = {"1", "true", "yes", "on"}


def _find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward until we find pyproject.toml or .git.
    """
    start = start.resolve()
    for p in (start, *start.parents):
        if (p / "pyproject.toml").exists() or (p / ".git").exists():
            return p
    return None


@lru_cache(maxsize=1)
def repo_root() -> Path:
    """Best-effort repository root discovery.

    Order of precedence:
      1) MSP_REPO_ROOT (explicit override)
      2) walk upward from current working directory
      3) walk upward from this module file's directory
    """
    explicit = os.getenv("MSP_REPO_ROOT")
    if explicit:
        p = Path(explicit).expanduser().resolve()
        if not p.is_dir():
            raise RuntimeError(f"MSP_REPO_ROOT does not exist or is not a directory: {p}")
        return p

    cwd = Path.cwd().resolve()
    root = _find_repo_root(cwd)
    if root:
        return root

    here_dir = Path(__file__).resolve().parent
    root = _find_repo_root(here_dir)
    if root:
        return root

    return cwd


@lru_cache(maxsize=1)
def load_env_once() -> Optional[Path]:
    """
    Load dotenv exactly once. Precedence:
      1) MSP_ENV_FILE (explicit path)
      2) repo-root/.env
      3) repo-root/config/.env
    """
    explicit = os.getenv("MSP_ENV_FILE")
    candidates = []

    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.append(repo_root() / ".env")
    candidates.append(repo_root() / "config" / ".env")

    for p in candidates:
        p = p.resolve()
        if p.is_file():
            # Do NOT override already-set environment variables
            load_dotenv(dotenv_path=str(p), override=False)
            return p

    return None


def env_flag(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def _env_int(value: str | None, default: int) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def load_client_config(environ: Mapping[str, str] | None = None) -> ClientConfig:
    """
    Build the API client configuration from the environment.

    Raises ConfigurationError when SUPEROPS_API_KEY or SUPEROPS_SUBDOMAIN is
    missing or empty.
    """
    env = os.environ if environ is None else environ
    return ClientConfig(
        api_key=(env.get("SUPEROPS_API_KEY") or "").strip(),
        subdomain=(env.get("SUPEROPS_SUBDOMAIN") or "").strip(),
        region=(env.get("SUPEROPS_REGION") or DEFAULT_REGION).strip().lower(),
        timeout_ms=_env_int(env.get("SUPEROPS_TIMEOUT"), DEFAULT_TIMEOUT_MS),
        read_only=env_flag(env.get("SUPEROPS_READ_ONLY")),
    )


def telemetry_dir() -> Path:
    """
    Default telemetry dir. Override with MSP_TELEMETRY_DIR.
    """
    p = os.getenv("MSP_TELEMETRY_DIR")
    if p:
        return Path(p).expanduser().resolve()
    return (repo_root() / "artifacts" / "telemetry").resolve()


def telemetry_disabled() -> bool:
    return env_flag(os.getenv("MSP_DISABLE_TELEMETRY"))


def api_index_path() -> Path:
    """
    API reference dataset. Override with SUPEROPS_API_INDEX.
    """
    p = os.getenv("SUPEROPS_API_INDEX")
    if p:
        return Path(p).expanduser().resolve()
    return (Path(__file__).resolve().parent.parent / "superops_mcp" / "data" / "api-index.json").resolve()


def configure_logging() -> None:
    """
    Configure logging explicitly. No import-time side effects.
    Idempotent: if logging is already configured, do nothing.

    Logs go to stderr; stdout carries the MCP stdio stream.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = os.getenv("MSP_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = os.getenv(
        "MSP_LOG_FORMAT",
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logging.basicConfig(level=level, format=fmt, stream=sys.stderr)
    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def init_runtime(*, configure_logs: bool = True, load_env: bool = True) -> None:
    """
    Call this from entrypoints only (servers, scripts).
    """
    if load_env:
        load_env_once()
    if configure_logs:
        configure_logging()
