"""Typed request, policy, credential and result models for key vault lookups."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from libs.keyvault.exceptions import ConfigurationError, KeyVaultError

DEFAULT_EXCLUDED_CHARACTERS = "'\";\\{}@"
DEFAULT_API_VERSION = "7.5"
DEFAULT_DESCRIPTION = "Created by keyvault-lookup"

# (id, version, store_locator)
CacheKey: TypeAlias = tuple[str, str | None, str]


class PasswordPolicy(BaseModel):
    """Character-set rules for generating a new secret value.

    ``require_each_included_type`` is recorded but not enforced: characters are
    drawn independently, so a retained category may not appear in the output.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    length: int = Field(default=32, gt=0, alias="password_length")
    excluded_characters: str = Field(
        default=DEFAULT_EXCLUDED_CHARACTERS, alias="exclude_characters"
    )
    exclude_numbers: bool = False
    exclude_punctuation: bool = False
    exclude_uppercase: bool = False
    exclude_lowercase: bool = False
    include_space: bool = False
    require_each_included_type: bool = True


class CreateOptions(PasswordPolicy):
    """Password policy plus create-on-miss switches."""

    create_missing: bool = True
    description: str = DEFAULT_DESCRIPTION


class LookupRequest(BaseModel):
    """
    Fully-resolved lookup request handed to the orchestrator.

    Field aliases accept the legacy option names (``vault``, ``api``,
    ``cache_stale``, ``password_length``, ``exclude_characters``) so an options
    hash can be validated directly via :meth:`from_options`.

    Example:
        >>> request = LookupRequest(id="db-pass", store_locator="kv1", api_host="vault.azure.net")
        >>> request.cache_key
        ('db-pass', None, 'kv1')
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    id: str = Field(min_length=1)
    version: str | None = None
    store_locator: str = Field(min_length=1, alias="vault")
    api_host: str = Field(min_length=1, alias="api")
    api_version: str = Field(default=DEFAULT_API_VERSION, min_length=1)
    cache_stale_minutes: float = Field(default=30, ge=0, alias="cache_stale")
    ignore_cache: bool = False
    normalize_id: bool = True
    create_options: CreateOptions = Field(default_factory=CreateOptions)

    @field_validator("version", mode="before")
    @classmethod
    def _empty_version_means_latest(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def cache_key(self) -> CacheKey:
        return (self.id, self.version, self.store_locator)

    @classmethod
    def from_options(cls, secret_id: str, options: Mapping[str, Any]) -> LookupRequest:
        """
        Build a request from a string-keyed options hash.

        ``None`` values are treated as "not supplied" so the model defaults
        apply. Missing vault or API host fails loudly instead of guessing.

        Raises:
            ConfigurationError: If the options do not validate
        """
        cleaned = {key: value for key, value in options.items() if value is not None}
        create_options = cleaned.get("create_options")
        if isinstance(create_options, Mapping):
            cleaned["create_options"] = {
                key: value for key, value in create_options.items() if value is not None
            }

        try:
            return cls.model_validate({"id": secret_id, **cleaned})
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid lookup options: {e}",
                secret_name=secret_id,
                vault=cleaned.get("vault") or cleaned.get("store_locator"),
            ) from e


@dataclass(frozen=True)
class BearerToken:
    """Short-lived credential for a single remote call. Never cached."""

    access_token: str = field(repr=False)
    resource: str

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.access_token}"


class FailureKind(str, Enum):
    """Which step of a remote operation failed."""

    AUTH = "auth"
    REMOTE = "remote"
    POLICY = "policy"


@dataclass(frozen=True)
class Found:
    payload: SecretStr


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    error: KeyVaultError

    @property
    def detail(self) -> str:
        return str(self.error)


FetchResult: TypeAlias = Found | NotFound | Failure
CreateResult: TypeAlias = Found | Failure
