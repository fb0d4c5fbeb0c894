"""
Settings for key vault lookups.

Uses Pydantic Settings; every field can be overridden with an ``AZUREKV_``
prefixed environment variable or a ``.env`` file.

Example:
    # Via environment variables
    export AZUREKV_VAULT="kv1"
    export AZUREKV_API_HOST="vault.azure.net"
    export AZUREKV_TOKEN_RESOURCE="https://vault.usgovcloudapi.net"

    # In code
    from libs.keyvault.config import get_settings
    request = get_settings().build_request("db-pass")
"""

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from libs.keyvault.exceptions import ConfigurationError
from libs.keyvault.models import DEFAULT_API_VERSION, LookupRequest
from libs.keyvault.token import DEFAULT_METADATA_API_VERSION, DEFAULT_METADATA_ENDPOINT


class KeyVaultSettings(BaseSettings):
    """Defaults used to resolve lookup requests and wire the HTTP clients."""

    model_config = SettingsConfigDict(
        env_prefix="AZUREKV_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    vault: str | None = Field(
        default=None,
        description="Default vault name (store locator); required unless passed per request",
    )
    api_host: str = Field(
        default="vault.azure.net",
        description="Secret store API host; the request URL is https://{vault}.{api_host}",
    )
    api_version: str = Field(default=DEFAULT_API_VERSION, description="Secret store REST API version")

    metadata_endpoint: str = Field(default=DEFAULT_METADATA_ENDPOINT)
    metadata_api_version: str = Field(default=DEFAULT_METADATA_API_VERSION)
    token_resource: str | None = Field(
        default=None,
        description="Fixed token audience; when unset the audience is https://{api_host}",
    )

    http_timeout_seconds: float = Field(default=10.0, gt=0)
    fetch_attempts: int = Field(
        default=1,
        ge=1,
        le=5,
        description="GET attempts on transport errors (1 = no retry)",
    )
    cache_stale_minutes: float = Field(default=30, ge=0)

    log_level: str = Field(default="INFO")

    def build_request(self, secret_id: str, **overrides: Any) -> LookupRequest:
        """
        Build a fully-resolved request, explicit ``overrides`` winning over settings.

        Raises:
            ConfigurationError: No vault configured, or overrides do not validate
        """
        options: dict[str, Any] = {
            "vault": self.vault,
            "api": self.api_host,
            "api_version": self.api_version,
            "cache_stale": self.cache_stale_minutes,
        }
        for name, value in overrides.items():
            if value is not None:
                options[_LEGACY_NAMES.get(name, name)] = value

        if not options.get("vault"):
            raise ConfigurationError(
                "No vault configured: pass vault=... or set AZUREKV_VAULT",
                secret_name=secret_id,
            )
        return LookupRequest.from_options(secret_id, options)


# Request field names mapped onto the option keys used by LookupRequest aliases
_LEGACY_NAMES = {
    "store_locator": "vault",
    "api_host": "api",
    "cache_stale_minutes": "cache_stale",
}


@lru_cache
def get_settings() -> KeyVaultSettings:
    """Return the process-wide settings instance."""
    return KeyVaultSettings()
