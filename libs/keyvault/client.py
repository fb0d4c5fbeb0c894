"""
Secret store REST client (fetch and create).

Both operations return tagged results instead of raising, so callers branch on
``Found`` / ``NotFound`` / ``Failure`` explicitly:

    GET https://{vault}.{api_host}/secrets/{id}[/{version}]?api-version={v}
        200 -> Found(value), 404 -> NotFound, other -> Failure(REMOTE)
    PUT https://{vault}.{api_host}/secrets/{id}?api-version={v}
        body {"value": ..., "tags": {"description": ...}}
        2xx -> Found(generated value), other -> Failure(REMOTE)

Security:
    - Secret values are wrapped in SecretStr and never logged
    - Each call acquires a fresh bearer token

Retries:
    Only the idempotent GET is retried, only on transport errors, and only when
    ``fetch_attempts > 1``. ``create`` is never retried: two PUTs would store
    two different random values.
"""

import logging
from types import TracebackType
from urllib.parse import quote

import httpx
from pydantic import SecretStr
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from libs.keyvault.exceptions import AuthError, PolicyError, RemoteError
from libs.keyvault.models import (
    DEFAULT_DESCRIPTION,
    CreateResult,
    Failure,
    FailureKind,
    FetchResult,
    Found,
    NotFound,
    PasswordPolicy,
)
from libs.keyvault.password import PasswordGenerator
from libs.keyvault.token import TokenProvider, audience_for

logger = logging.getLogger(__name__)


def secret_url(secret_id: str, store_locator: str, api_host: str, version: str | None = None) -> str:
    """Build the secret resource URL; the version segment is omitted for "latest".

    Id and version are percent-encoded as single path segments.
    """
    url = f"https://{store_locator}.{api_host}/secrets/{quote(secret_id, safe='')}"
    if version:
        url += f"/{quote(version, safe='')}"
    return url


class SecretStoreClient:
    """Authenticated HTTPS client for a key-vault style secret store."""

    def __init__(
        self,
        token_provider: TokenProvider,
        http_client: httpx.Client | None = None,
        timeout: float = 10.0,
        resource_override: str | None = None,
        fetch_attempts: int = 1,
        generator: PasswordGenerator | None = None,
    ) -> None:
        if fetch_attempts < 1:
            raise ValueError("fetch_attempts must be >= 1")

        self._token_provider = token_provider
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout)
        self._resource_override = resource_override
        self._fetch_attempts = fetch_attempts
        self._generator = generator or PasswordGenerator()

    def fetch(
        self,
        secret_id: str,
        version: str | None,
        store_locator: str,
        api_host: str,
        api_version: str,
    ) -> FetchResult:
        """
        GET one secret version from the store.

        Args:
            secret_id: Remote secret name (already normalized if required)
            version: Specific version, or None for the latest
            store_locator: Vault name, the first label of the store host
            api_host: Store API host suffix (e.g., "vault.azure.net")
            api_version: Value for the ``api-version`` query parameter

        Returns:
            Found with the value as SecretStr, NotFound on HTTP 404, or
            Failure(AUTH) / Failure(REMOTE) for token, transport, status or
            body errors. Never raises for remote conditions.
        """
        logger.debug(
            "Fetching secret",
            extra={"secret_name": secret_id, "secret_version": version, "vault": store_locator},
        )
        try:
            token = self._token_provider.acquire(audience_for(api_host, self._resource_override))
        except AuthError as e:
            return Failure(FailureKind.AUTH, e)

        url = secret_url(secret_id, store_locator, api_host, version)
        try:
            response = self._get_with_retry(url, api_version, token.authorization_header)
        except httpx.HTTPError as e:
            return Failure(
                FailureKind.REMOTE,
                RemoteError(
                    secret_name=secret_id,
                    vault=store_locator,
                    reason=f"Secret store unreachable: {type(e).__name__}: {e}",
                ),
            )

        if response.status_code == httpx.codes.NOT_FOUND:
            logger.debug("Secret not found", extra={"secret_name": secret_id, "vault": store_locator})
            return NotFound()

        if not response.is_success:
            return Failure(
                FailureKind.REMOTE,
                RemoteError(
                    secret_name=secret_id,
                    vault=store_locator,
                    reason=f"Non-specific error when looking up {secret_id}",
                    status_code=response.status_code,
                    body=response.text,
                ),
            )

        try:
            value = response.json()["value"]
            if not isinstance(value, str):
                raise TypeError("value is not a string")
        except (ValueError, KeyError, TypeError) as e:
            # Body may hold the secret; never echo it back.
            return Failure(
                FailureKind.REMOTE,
                RemoteError(
                    secret_name=secret_id,
                    vault=store_locator,
                    reason=f"Secret store response has no readable 'value' field ({type(e).__name__})",
                    status_code=response.status_code,
                ),
            )

        logger.debug("Secret response received", extra={"secret_name": secret_id, "vault": store_locator})
        return Found(SecretStr(value))

    def _get_with_retry(self, url: str, api_version: str, authorization: str) -> httpx.Response:
        retrying = Retrying(
            stop=stop_after_attempt(self._fetch_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=5),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                return self._client.get(
                    url,
                    params={"api-version": api_version},
                    headers={"Authorization": authorization},
                )
        raise AssertionError("unreachable")  # pragma: no cover

    def create(
        self,
        secret_id: str,
        store_locator: str,
        api_host: str,
        api_version: str,
        policy: PasswordPolicy,
        description: str = DEFAULT_DESCRIPTION,
    ) -> CreateResult:
        """
        Generate a value under ``policy`` and PUT it as a new secret.

        Not idempotent: every call generates and writes a different value.

        Args:
            secret_id: Remote secret name (already normalized if required)
            store_locator: Vault name
            api_host: Store API host suffix
            api_version: Value for the ``api-version`` query parameter
            policy: Character rules for the generated value
            description: Stored as the ``description`` tag

        Returns:
            Found with the generated value, Failure(POLICY) when the policy
            leaves no characters (no request is made), or Failure(AUTH) /
            Failure(REMOTE)
        """
        logger.debug("Creating secret", extra={"secret_name": secret_id, "vault": store_locator})
        try:
            secret = self._generator.generate(policy)
        except PolicyError as e:
            e.secret_name = secret_id
            e.vault = store_locator
            return Failure(FailureKind.POLICY, e)

        try:
            token = self._token_provider.acquire(audience_for(api_host, self._resource_override))
        except AuthError as e:
            return Failure(FailureKind.AUTH, e)

        url = secret_url(secret_id, store_locator, api_host)
        body = {"value": secret, "tags": {"description": description}}
        try:
            response = self._client.put(
                url,
                params={"api-version": api_version},
                headers={"Authorization": token.authorization_header},
                json=body,
            )
        except httpx.HTTPError as e:
            return Failure(
                FailureKind.REMOTE,
                RemoteError(
                    secret_name=secret_id,
                    vault=store_locator,
                    reason=f"Secret store unreachable: {type(e).__name__}: {e}",
                ),
            )

        if not response.is_success:
            return Failure(
                FailureKind.REMOTE,
                RemoteError(
                    secret_name=secret_id,
                    vault=store_locator,
                    reason=f"Non-specific error when creating {secret_id}",
                    status_code=response.status_code,
                    body=response.text,
                ),
            )

        logger.info("Secret created", extra={"secret_name": secret_id, "vault": store_locator})
        return Found(SecretStr(secret))

    def close(self) -> None:
        """Close the owned HTTP client and the token provider."""
        if self._owns_client:
            self._client.close()
        self._token_provider.close()

    def __enter__(self) -> "SecretStoreClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
