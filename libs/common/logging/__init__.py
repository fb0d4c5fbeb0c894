"""Structured JSON logging with secret redaction.

Usage:
    from libs.common.logging import configure_logging, get_logger
    configure_logging(service_name="keyvault_lookup", log_level="INFO")
    logger = get_logger(__name__)
    logger.info("Lookup finished", extra={"secret_name": "db-pass", "cache_hit": True})
"""

from libs.common.logging.config import configure_logging, get_logger
from libs.common.logging.formatter import REDACTED, SENSITIVE_KEYS, JSONFormatter, redact

__all__ = [
    "configure_logging",
    "get_logger",
    "JSONFormatter",
    "redact",
    "REDACTED",
    "SENSITIVE_KEYS",
]
