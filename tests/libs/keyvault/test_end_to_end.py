"""End-to-end lookup against mocked metadata and secret store endpoints."""

import json
import logging
from datetime import timedelta

import httpx
import pytest
import respx

from libs.keyvault import (
    InMemoryCache,
    KeyVaultSettings,
    LookupOrchestrator,
    LookupRequest,
    RemoteError,
    SecretStoreClient,
    TokenProvider,
    configure_lookup_logging,
    create_lookup_orchestrator,
)
from libs.keyvault.lookup import CACHE_NAMESPACE

VAULT_HOST = "kv1.vault.azure.net"


class TestCreateOnMiss:
    @pytest.mark.unit()
    def test_missing_secret_created_and_cached(
        self, mock_router: respx.MockRouter, token_route: respx.Route, clock
    ) -> None:
        """404 on GET, PUT accepted: a 16 character value is returned and cached."""
        get_route = mock_router.get(host=VAULT_HOST, path="/secrets/db-pass").mock(
            return_value=httpx.Response(404, json={"error": {"code": "SecretNotFound"}})
        )
        put_route = mock_router.put(host=VAULT_HOST, path="/secrets/db-pass").mock(
            return_value=httpx.Response(200, json={"id": "https://kv1.vault.azure.net/secrets/db-pass/1"})
        )
        cache = InMemoryCache()
        request = LookupRequest.from_options(
            "db-pass",
            {"vault": "kv1", "api": "vault.azure.net", "create_options": {"create_missing": True, "password_length": 16}},
        )

        with LookupOrchestrator(SecretStoreClient(TokenProvider()), clock=clock) as orchestrator:
            secret = orchestrator.lookup(cache, request)

        value = secret.get_secret_value()
        assert len(value) == 16
        assert get_route.call_count == 1
        assert put_route.call_count == 1
        assert json.loads(put_route.calls.last.request.content)["value"] == value
        # One fresh token for the GET, one for the PUT
        assert token_route.call_count == 2

        entry = cache.retrieve(CACHE_NAMESPACE)[("db-pass", None, "kv1")]
        assert entry.data.get_secret_value() == value
        assert entry.fetched_at == clock.now

    @pytest.mark.unit()
    def test_subsequent_lookup_hits_cache(
        self, mock_router: respx.MockRouter, token_route: respx.Route, clock
    ) -> None:
        get_route = mock_router.get(host=VAULT_HOST, path="/secrets/db-pass").mock(
            return_value=httpx.Response(200, json={"value": "existing"})
        )
        cache = InMemoryCache()
        request = LookupRequest(id="db-pass", store_locator="kv1", api_host="vault.azure.net")

        with LookupOrchestrator(SecretStoreClient(TokenProvider()), clock=clock) as orchestrator:
            first = orchestrator.lookup(cache, request)
            clock.now += timedelta(minutes=5)
            second = orchestrator.lookup(cache, request)

        assert first.get_secret_value() == second.get_secret_value() == "existing"
        assert get_route.call_count == 1
        assert token_route.call_count == 1

    @pytest.mark.unit()
    def test_null_value_raises_and_is_not_cached(
        self, mock_router: respx.MockRouter, token_route: respx.Route, clock
    ) -> None:
        mock_router.get(host=VAULT_HOST, path="/secrets/db-pass").mock(
            return_value=httpx.Response(200, json={"value": None})
        )
        cache = InMemoryCache()
        request = LookupRequest(id="db-pass", store_locator="kv1", api_host="vault.azure.net")

        with LookupOrchestrator(SecretStoreClient(TokenProvider()), clock=clock) as orchestrator:
            with pytest.raises(RemoteError, match="no readable 'value' field"):
                orchestrator.lookup(cache, request)

        assert len(cache) == 0


class TestFactoryWiring:
    @pytest.mark.unit()
    def test_factory_uses_settings(self, mock_router: respx.MockRouter) -> None:
        token_route = mock_router.get(host="imds.local", path="/token").mock(
            return_value=httpx.Response(200, json={"access_token": "gov-token"})
        )
        get_route = mock_router.get(host="kv1.vault.usgovcloudapi.net", path="/secrets/db-pass").mock(
            return_value=httpx.Response(200, json={"value": "gov-secret"})
        )
        settings = KeyVaultSettings(
            _env_file=None,
            vault="kv1",
            api_host="vault.usgovcloudapi.net",
            api_version="7.4",
            metadata_endpoint="http://imds.local/token",
            token_resource="https://vault.usgovcloudapi.net",
        )

        with create_lookup_orchestrator(settings) as orchestrator:
            secret = orchestrator.lookup(InMemoryCache(), settings.build_request("db-pass"))

        assert secret.get_secret_value() == "gov-secret"
        assert token_route.calls.last.request.url.params["resource"] == "https://vault.usgovcloudapi.net"
        assert get_route.calls.last.request.url.params["api-version"] == "7.4"
        assert get_route.calls.last.request.headers["Authorization"] == "Bearer gov-token"


class TestLoggingWiring:
    def teardown_method(self) -> None:
        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.NOTSET)

    @pytest.mark.unit()
    def test_log_level_from_settings(self) -> None:
        settings = KeyVaultSettings(_env_file=None, log_level="DEBUG")

        root_logger = configure_lookup_logging(settings)

        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 1

    @pytest.mark.unit()
    def test_log_level_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AZUREKV_LOG_LEVEL", "warning")

        root_logger = configure_lookup_logging(KeyVaultSettings(_env_file=None))

        assert root_logger.level == logging.WARNING

    @pytest.mark.unit()
    def test_invalid_log_level_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_lookup_logging(KeyVaultSettings(_env_file=None, log_level="LOUD"))
