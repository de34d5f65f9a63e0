import logging
import os

import pytest

import msp_config.settings as settings
from superops_mcp.core_infrastructure.config import DEFAULT_TIMEOUT_MS, ClientConfig
from superops_mcp.core_infrastructure.errors import ConfigurationError


def test_client_config_defaults():
    cfg = ClientConfig(api_key="k", subdomain="acme")
    assert cfg.region == "us"
    assert cfg.timeout_ms == DEFAULT_TIMEOUT_MS
    assert cfg.timeout_seconds == 30.0
    assert cfg.read_only is False
    assert cfg.endpoint == "https://api.superops.ai/msp"


@pytest.mark.parametrize(
    "kwargs, message",
    [
        (dict(api_key="", subdomain="acme"), "SUPEROPS_API_KEY is required"),
        (dict(api_key="   ", subdomain="acme"), "SUPEROPS_API_KEY is required"),
        (dict(api_key="k", subdomain=""), "SUPEROPS_SUBDOMAIN is required"),
        (dict(api_key="k", subdomain=" \t"), "SUPEROPS_SUBDOMAIN is required"),
    ],
)
def test_client_config_requires_credentials(kwargs, message):
    with pytest.raises(ConfigurationError, match=message):
        ClientConfig(**kwargs)


@pytest.mark.parametrize("timeout", [None, 0, -5])
def test_non_positive_timeout_falls_back_to_default(timeout):
    assert ClientConfig(api_key="k", subdomain="s", timeout_ms=timeout).timeout_ms == DEFAULT_TIMEOUT_MS


def test_unknown_region_uses_us_host():
    assert ClientConfig(api_key="k", subdomain="s", region="apac").host == "api.superops.ai"
    assert ClientConfig(api_key="k", subdomain="s", region="eu").host == "euapi.superops.ai"


def test_load_client_config_from_mapping():
    cfg = settings.load_client_config(
        {
            "SUPEROPS_API_KEY": " key ",
            "SUPEROPS_SUBDOMAIN": "acme",
            "SUPEROPS_REGION": "EU",
            "SUPEROPS_TIMEOUT": "1500",
            "SUPEROPS_READ_ONLY": "true",
        }
    )
    assert cfg.api_key == "key"
    assert cfg.region == "eu"
    assert cfg.endpoint == "https://euapi.superops.ai/msp"
    assert cfg.timeout_ms == 1500
    assert cfg.read_only is True


def test_load_client_config_tolerates_bad_timeout_and_flags():
    cfg = settings.load_client_config(
        {"SUPEROPS_API_KEY": "k", "SUPEROPS_SUBDOMAIN": "s", "SUPEROPS_TIMEOUT": "soon", "SUPEROPS_READ_ONLY": "nah"}
    )
    assert cfg.timeout_ms == DEFAULT_TIMEOUT_MS
    assert cfg.read_only is False


def test_load_client_config_reads_process_env(monkeypatch):
    monkeypatch.setenv("SUPEROPS_API_KEY", "env-key")
    monkeypatch.setenv("SUPEROPS_SUBDOMAIN", "env-sub")
    monkeypatch.delenv("SUPEROPS_REGION", raising=False)
    monkeypatch.delenv("SUPEROPS_TIMEOUT", raising=False)
    monkeypatch.delenv("SUPEROPS_READ_ONLY", raising=False)

    cfg = settings.load_client_config()
    assert cfg.subdomain == "env-sub"
    assert cfg.region == "us"


def test_load_client_config_missing_key_raises():
    with pytest.raises(ConfigurationError):
        settings.load_client_config({"SUPEROPS_SUBDOMAIN": "acme"})


@pytest.mark.parametrize(
    "value, expected",
    [("1", True), ("TRUE", True), (" yes ", True), ("on", True), ("0", False), ("false", False), ("", False)],
)
def test_env_flag(value, expected):
    assert settings.env_flag(value) is expected


def test_env_flag_default():
    assert settings.env_flag(None) is False
    assert settings.env_flag(None, default=True) is True


def test_telemetry_dir_override(tmp_path, monkeypatch):
    monkeypatch.setenv("MSP_TELEMETRY_DIR", str(tmp_path / "t"))
    assert settings.telemetry_dir() == (tmp_path / "t").resolve()


def test_telemetry_disabled(monkeypatch):
    monkeypatch.setenv("MSP_DISABLE_TELEMETRY", "1")
    assert settings.telemetry_disabled() is True
    monkeypatch.delenv("MSP_DISABLE_TELEMETRY")
    assert settings.telemetry_disabled() is False


def test_api_index_path_default_is_bundled_file(monkeypatch):
    monkeypatch.delenv("SUPEROPS_API_INDEX", raising=False)
    p = settings.api_index_path()
    assert p.name == "api-index.json"
    assert p.parent.name == "data"
    assert p.is_file()


def test_repo_root_override(tmp_path, monkeypatch):
    settings.repo_root.cache_clear()
    monkeypatch.setenv("MSP_REPO_ROOT", str(tmp_path))
    try:
        assert settings.repo_root() == tmp_path.resolve()
    finally:
        settings.repo_root.cache_clear()


def test_repo_root_override_must_exist(tmp_path, monkeypatch):
    settings.repo_root.cache_clear()
    monkeypatch.setenv("MSP_REPO_ROOT", str(tmp_path / "missing"))
    try:
        with pytest.raises(RuntimeError):
            settings.repo_root()
    finally:
        settings.repo_root.cache_clear()


def test_load_env_once_does_not_override_existing_values(tmp_path, monkeypatch):
    env_file = tmp_path / "custom.env"
    env_file.write_text("SUPEROPS_SUBDOMAIN=from-file\nSUPEROPS_REGION=eu\n", encoding="utf-8")

    monkeypatch.setenv("MSP_ENV_FILE", str(env_file))
    monkeypatch.setenv("SUPEROPS_SUBDOMAIN", "from-env")
    monkeypatch.delenv("SUPEROPS_REGION", raising=False)

    settings.load_env_once.cache_clear()
    try:
        assert settings.load_env_once() == env_file.resolve()
        assert os.environ["SUPEROPS_SUBDOMAIN"] == "from-env"
        assert os.environ["SUPEROPS_REGION"] == "eu"
    finally:
        settings.load_env_once.cache_clear()
        os.environ.pop("SUPEROPS_REGION", None)


def test_configure_logging_is_idempotent_when_handlers_exist(monkeypatch):
    root = logging.getLogger()
    marker = logging.NullHandler()
    root.addHandler(marker)
    try:
        before = list(root.handlers)
        settings.configure_logging()
        assert root.handlers == before
    finally:
        root.removeHandler(marker)
