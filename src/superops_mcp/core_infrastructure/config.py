from __future__ import annotations

from dataclasses import dataclass

from superops_mcp.core_infrastructure.errors import ConfigurationError

DEFAULT_TIMEOUT_MS = 30000
DEFAULT_REGION = "us"

US_HOST = "api.superops.ai"
EU_HOST = "euapi.superops.ai"
ENDPOINT_PATH = "/msp"

USER_AGENT = "superops-msp-mcp/1.0"


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable connection settings for the SuperOps MSP API.

    Validated once, here. A missing or non-positive timeout falls back to
    DEFAULT_TIMEOUT_MS; any region other than "eu" targets the US host.
    """

    api_key: str
    subdomain: str
    region: str | None = DEFAULT_REGION
    timeout_ms: int | None = DEFAULT_TIMEOUT_MS
    read_only: bool = False

    def __post_init__(self) -> None:
        if not self.api_key or not str(self.api_key).strip():
            raise ConfigurationError("SUPEROPS_API_KEY is required")
        if not self.subdomain or not str(self.subdomain).strip():
            raise ConfigurationError("SUPEROPS_SUBDOMAIN is required")

        if not self.timeout_ms or self.timeout_ms <= 0:
            object.__setattr__(self, "timeout_ms", DEFAULT_TIMEOUT_MS)
        object.__setattr__(self, "read_only", bool(self.read_only))

    @property
    def host(self) -> str:
        return EU_HOST if self.region == "eu" else US_HOST

    @property
    def endpoint(self) -> str:
        return f"https://{self.host}{ENDPOINT_PATH}"

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    def __repr__(self) -> str:
        # never expose the credential
        return (
            f"ClientConfig(subdomain={self.subdomain!r}, region={self.region!r}, "
            f"timeout_ms={self.timeout_ms!r}, read_only={self.read_only!r})"
        )
