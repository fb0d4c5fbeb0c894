"""
Bearer token acquisition from the instance metadata service.

A fresh token is requested for every remote call; tokens are never cached or
reused. A single failed attempt surfaces immediately as :class:`AuthError`.

Example:
    >>> provider = TokenProvider()
    >>> token = provider.acquire(audience_for("vault.azure.net"))
    >>> token.authorization_header  # "Bearer eyJ0..."
"""

import logging
from types import TracebackType

import httpx

from libs.keyvault.exceptions import AuthError
from libs.keyvault.models import BearerToken

logger = logging.getLogger(__name__)

DEFAULT_METADATA_ENDPOINT = "http://169.254.169.254/metadata/identity/oauth2/token"
DEFAULT_METADATA_API_VERSION = "2018-02-01"


def audience_for(api_host: str, resource_override: str | None = None) -> str:
    """Return the token audience for a store API host.

    ``resource_override`` is the fixed resource identifier used by clouds whose
    audience does not follow the API host (e.g. "https://vault.usgovcloudapi.net").
    """
    if resource_override:
        return resource_override
    return f"https://{api_host}"


class TokenProvider:
    """Fetches short-lived bearer tokens from a loopback metadata endpoint."""

    def __init__(
        self,
        endpoint: str = DEFAULT_METADATA_ENDPOINT,
        api_version: str = DEFAULT_METADATA_API_VERSION,
        http_client: httpx.Client | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._endpoint = endpoint
        self._api_version = api_version
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout)

    def acquire(self, resource: str) -> BearerToken:
        """
        Request a token scoped to ``resource``.

        Raises:
            AuthError: Endpoint unreachable, non-success status, or no
                ``access_token`` in the response body
        """
        params = {"api-version": self._api_version, "resource": resource}
        try:
            response = self._client.get(
                self._endpoint,
                params=params,
                headers={"Metadata": "true"},
            )
        except httpx.HTTPError as e:
            logger.debug(
                "Metadata endpoint unreachable",
                extra={"endpoint": self._endpoint, "resource": resource, "error_type": type(e).__name__},
            )
            raise AuthError(f"metadata endpoint unreachable: {e}", resource=resource) from e

        if not response.is_success:
            raise AuthError(
                f"metadata endpoint returned HTTP {response.status_code}: {response.text}",
                resource=resource,
            )

        try:
            access_token = response.json().get("access_token")
        except (ValueError, AttributeError) as e:
            raise AuthError("metadata response is not a JSON object", resource=resource) from e

        if not isinstance(access_token, str) or not access_token:
            raise AuthError("metadata response has no access_token", resource=resource)

        logger.debug("Bearer token acquired", extra={"resource": resource})
        return BearerToken(access_token=access_token, resource=resource)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "TokenProvider":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
