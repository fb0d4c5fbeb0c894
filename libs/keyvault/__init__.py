"""
Key Vault secret lookup with create-on-miss.

Looks up a secret by name (and optional version) in a key-vault style secret
store, authenticating with a bearer token from the instance metadata service.
Missing secrets are created with a random value when allowed. Results are
cached in a host-owned cache handle.

Quick Start:
    >>> from libs.keyvault import InMemoryCache, LookupRequest, lookup
    >>> cache = InMemoryCache()  # keep for the process lifetime
    >>> request = LookupRequest(id="db-pass", store_locator="kv1", api_host="vault.azure.net")
    >>> secret = lookup(cache, request)  # SecretStr

Security Requirements:
    - Secret values NEVER logged (only names and vaults)
    - Values returned as pydantic SecretStr
    - Bearer tokens are requested per call and never cached
"""

from libs.keyvault.cache import CacheEntry, CacheHandle, InMemoryCache
from libs.keyvault.client import SecretStoreClient
from libs.keyvault.config import KeyVaultSettings, get_settings
from libs.keyvault.exceptions import (
    AuthError,
    ConfigurationError,
    KeyVaultError,
    NotFoundError,
    PolicyError,
    RemoteError,
)
from libs.keyvault.factory import configure_lookup_logging, create_lookup_orchestrator
from libs.keyvault.identifiers import normalize
from libs.keyvault.lookup import LookupOrchestrator, lookup
from libs.keyvault.models import (
    BearerToken,
    CreateOptions,
    Failure,
    FailureKind,
    Found,
    LookupRequest,
    NotFound,
    PasswordPolicy,
)
from libs.keyvault.password import PasswordGenerator, generate_password
from libs.keyvault.token import TokenProvider, audience_for

__all__ = [
    # Entry points
    "lookup",
    "LookupOrchestrator",
    "create_lookup_orchestrator",
    "configure_lookup_logging",
    # Components
    "SecretStoreClient",
    "TokenProvider",
    "PasswordGenerator",
    "generate_password",
    "normalize",
    "audience_for",
    # Cache collaborator
    "CacheHandle",
    "CacheEntry",
    "InMemoryCache",
    # Models
    "LookupRequest",
    "CreateOptions",
    "PasswordPolicy",
    "BearerToken",
    "Found",
    "NotFound",
    "Failure",
    "FailureKind",
    # Configuration
    "KeyVaultSettings",
    "get_settings",
    # Exceptions (callers should catch these)
    "KeyVaultError",
    "AuthError",
    "RemoteError",
    "NotFoundError",
    "PolicyError",
    "ConfigurationError",
]
