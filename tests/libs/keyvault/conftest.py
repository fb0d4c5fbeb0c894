"""Shared fixtures for key vault lookup tests."""

from collections.abc import Iterator
from datetime import UTC, datetime

import httpx
import pytest
import respx

from libs.keyvault.client import SecretStoreClient
from libs.keyvault.token import TokenProvider

METADATA_HOST = "169.254.169.254"
METADATA_PATH = "/metadata/identity/oauth2/token"


class FakeClock:
    """Manually advanced clock for freshness tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 10, 19, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def mock_router() -> Iterator[respx.MockRouter]:
    """respx router that tolerates routes a test never reaches."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture()
def token_route(mock_router: respx.MockRouter) -> respx.Route:
    return mock_router.get(host=METADATA_HOST, path=METADATA_PATH).mock(
        return_value=httpx.Response(200, json={"access_token": "test-token", "expires_in": "3599"})
    )


@pytest.fixture()
def store_client() -> Iterator[SecretStoreClient]:
    with SecretStoreClient(TokenProvider()) as client:
        yield client
