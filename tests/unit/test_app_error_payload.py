import pytest

from superops_mcp import app
from superops_mcp.core_infrastructure import (
    APIError,
    ClientConfig,
    ConfigurationError,
    InvalidResponseError,
    ReadOnlyViolation,
    RequestTimeoutError,
    SuperOpsClient,
    TransportError,
)


@pytest.mark.parametrize(
    "exc, code",
    [
        (APIError(401, {"message": "bad token"}), "auth_error"),
        (APIError(403, {}), "auth_error"),
        (APIError(429, {}), "rate_limited"),
        (APIError(200, [{"message": "Unknown field 'foo'"}]), "graphql_error"),
        (APIError(500, {"message": "oops"}), "api_error"),
        (APIError(404, {}), "api_error"),
        (ReadOnlyViolation(), "read_only"),
        (RequestTimeoutError(30000), "timeout"),
        (InvalidResponseError(502, "<html>"), "invalid_response"),
        (TransportError("ConnectError: refused"), "upstream_unreachable"),
        (ConfigurationError("SUPEROPS_API_KEY is required"), "config_error"),
        (RuntimeError("surprise"), "internal"),
    ],
)
def test_error_payload_codes(exc, code):
    assert app.error_payload(exc)["error"]["code"] == code


def test_auth_error_prompts_credential_check():
    out = app.error_payload(APIError(401, {}))
    assert "SUPEROPS_API_KEY" in out["error"]["message"]
    assert out["error"]["details"] == {"status": 401}


def test_rate_limit_message_asks_to_retry_later():
    out = app.error_payload(APIError(429, {}))
    assert "try again" in out["error"]["message"]


def test_graphql_error_carries_formatted_message():
    out = app.error_payload(APIError(200, [{"message": "a"}, {"message": "b"}]))
    assert out["error"]["message"] == "a; b"


def test_api_error_message_format():
    out = app.error_payload(APIError(500, {"message": "oops"}))
    assert out["error"]["message"] == "API error (500): HTTP 500: oops"


def test_timeout_details():
    out = app.error_payload(RequestTimeoutError(1234))
    assert out["error"]["details"] == {"timeout_ms": 1234}


def test_get_client_builds_once_from_env(monkeypatch):
    monkeypatch.setenv("SUPEROPS_API_KEY", "k")
    monkeypatch.setenv("SUPEROPS_SUBDOMAIN", "acme")
    monkeypatch.setenv("SUPEROPS_REGION", "eu")

    first = app.get_client()
    assert isinstance(first, SuperOpsClient)
    assert first.endpoint == "https://euapi.superops.ai/msp"
    assert app.get_client() is first


def test_get_client_without_credentials_raises(monkeypatch):
    monkeypatch.delenv("SUPEROPS_API_KEY", raising=False)
    monkeypatch.delenv("SUPEROPS_SUBDOMAIN", raising=False)
    with pytest.raises(ConfigurationError):
        app.get_client()


def test_set_client_replaces_the_shared_client():
    client = SuperOpsClient(ClientConfig(api_key="k", subdomain="s"))
    app.set_client(client)
    assert app.get_client() is client
