"""
Factory wiring TokenProvider -> SecretStoreClient -> LookupOrchestrator from settings,
plus host logging setup from the same settings.

Example:
    >>> from libs.keyvault.factory import create_lookup_orchestrator
    >>> with create_lookup_orchestrator() as orchestrator:
    ...     secret = orchestrator.lookup(cache, request)
"""

import logging

from libs.common.logging import configure_logging
from libs.keyvault.client import SecretStoreClient
from libs.keyvault.config import KeyVaultSettings, get_settings
from libs.keyvault.lookup import LookupOrchestrator
from libs.keyvault.token import TokenProvider

logger = logging.getLogger(__name__)


def create_lookup_orchestrator(settings: KeyVaultSettings | None = None) -> LookupOrchestrator:
    """
    Build a LookupOrchestrator with its own HTTP clients.

    Args:
        settings: Explicit settings; defaults to the process-wide ``get_settings()``

    Returns:
        LookupOrchestrator whose ``close()`` releases both HTTP clients
    """
    settings = settings or get_settings()

    token_provider = TokenProvider(
        endpoint=settings.metadata_endpoint,
        api_version=settings.metadata_api_version,
        timeout=settings.http_timeout_seconds,
    )
    client = SecretStoreClient(
        token_provider,
        timeout=settings.http_timeout_seconds,
        resource_override=settings.token_resource,
        fetch_attempts=settings.fetch_attempts,
    )
    logger.debug(
        "Lookup orchestrator created",
        extra={
            "api_host": settings.api_host,
            "metadata_endpoint": settings.metadata_endpoint,
            "fetch_attempts": settings.fetch_attempts,
        },
    )
    return LookupOrchestrator(client)


def configure_lookup_logging(
    settings: KeyVaultSettings | None = None,
    service_name: str = "keyvault_lookup",
) -> logging.Logger:
    """
    Install JSON logging at ``settings.log_level`` (``AZUREKV_LOG_LEVEL``).

    For hosts that have no logging setup of their own; call once at startup.

    Raises:
        ValueError: If the configured level is not a standard level name
    """
    settings = settings or get_settings()
    return configure_logging(service_name=service_name, log_level=settings.log_level)
