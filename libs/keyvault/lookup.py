"""
Secret lookup orchestration.

State machine for one lookup:

    CHECK_CACHE -> HIT_FRESH                                   (no network)
    CHECK_CACHE -> FETCHING -> FOUND                 -> cache write, return
                            -> NOT_FOUND -> CREATING -> cache write, return
                            -> NOT_FOUND (create disabled) -> NotFoundError
                            -> FAILURE                -> raise, cache untouched

A cache entry is fresh iff ``now - fetched_at < cache_stale_minutes``.
``ignore_cache`` skips the read but not the write. A cache hit never rewrites
the entry's timestamp.

Example:
    >>> orchestrator = create_lookup_orchestrator()
    >>> request = LookupRequest(id="db-pass", store_locator="kv1", api_host="vault.azure.net")
    >>> secret = orchestrator.lookup(InMemoryCache(), request)
    >>> secret.get_secret_value()  # never log this
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from types import TracebackType

from pydantic import SecretStr

from libs.keyvault.cache import CacheEntry, CacheHandle
from libs.keyvault.client import SecretStoreClient
from libs.keyvault.exceptions import NotFoundError
from libs.keyvault.identifiers import normalize
from libs.keyvault.models import Failure, Found, LookupRequest, NotFound

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "keyvault.lookup"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LookupOrchestrator:
    """Entry point: cache check, fetch, create-on-miss, cache write."""

    def __init__(
        self,
        client: SecretStoreClient,
        clock: Callable[[], datetime] = _utcnow,
        namespace: str = CACHE_NAMESPACE,
    ) -> None:
        self._client = client
        self._clock = clock
        self._namespace = namespace

    def lookup(self, cache: CacheHandle, request: LookupRequest) -> SecretStr:
        """
        Return the secret for ``request``, from cache when fresh.

        Raises:
            AuthError: Bearer token could not be acquired
            RemoteError: Store returned a non-2xx, non-404 response
            NotFoundError: Secret absent and ``create_missing`` is false
            PolicyError: Create policy leaves no usable characters
        """
        logger.debug(
            "Lookup started",
            extra={"secret_name": request.id, "secret_version": request.version, "vault": request.store_locator},
        )
        entries = cache.retrieve(self._namespace)
        key = request.cache_key

        if not request.ignore_cache:
            cached = entries.get(key)
            if cached is not None:
                if self._is_fresh(cached, request.cache_stale_minutes):
                    logger.debug("Returning cached value that is still fresh", extra={"secret_name": request.id})
                    self._log_success(request, cache_hit=True)
                    return cached.data
                logger.debug("Cached value is stale, fetching new one", extra={"secret_name": request.id})

        remote_id = normalize(request.id) if request.normalize_id else request.id
        result = self._client.fetch(
            remote_id,
            request.version,
            request.store_locator,
            request.api_host,
            request.api_version,
        )

        if isinstance(result, NotFound):
            options = request.create_options
            if not options.create_missing:
                raise NotFoundError(request.id, request.store_locator, request.version)
            logger.info(
                "Secret missing, creating it",
                extra={"secret_name": request.id, "vault": request.store_locator},
            )
            result = self._client.create(
                remote_id,
                request.store_locator,
                request.api_host,
                request.api_version,
                options,
                description=options.description,
            )

        if isinstance(result, Failure):
            logger.error(
                "Lookup failed",
                extra={
                    "secret_name": request.id,
                    "vault": request.store_locator,
                    "failure_kind": result.kind.value,
                },
            )
            raise result.error

        assert isinstance(result, Found)
        entries[key] = CacheEntry(data=result.payload, fetched_at=self._clock())
        logger.debug("New value stored in cache", extra={"secret_name": request.id})
        self._log_success(request, cache_hit=False)
        return result.payload

    def _is_fresh(self, entry: CacheEntry, stale_minutes: float) -> bool:
        return self._clock() - entry.fetched_at < timedelta(minutes=stale_minutes)

    def _log_success(self, request: LookupRequest, cache_hit: bool) -> None:
        logger.info(
            "Successfully looked up secret",
            extra={"secret_name": request.id, "vault": request.store_locator, "cache_hit": cache_hit},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "LookupOrchestrator":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


def lookup(
    cache: CacheHandle,
    request: LookupRequest,
    orchestrator: LookupOrchestrator | None = None,
) -> SecretStr:
    """Module-level convenience wrapper; builds an orchestrator from settings if none given."""
    if orchestrator is not None:
        return orchestrator.lookup(cache, request)

    from libs.keyvault.factory import create_lookup_orchestrator

    with create_lookup_orchestrator() as default_orchestrator:
        return default_orchestrator.lookup(cache, request)
