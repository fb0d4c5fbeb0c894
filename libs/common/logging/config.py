"""Logging setup for hosts embedding the key vault lookup library.

Library modules only call ``logging.getLogger(__name__)`` and pass structured
fields through ``extra``. The host calls :func:`configure_logging` once at
startup to get redacted JSON output on stdout.

Example:
    >>> from libs.common.logging import configure_logging
    >>> configure_logging(service_name="keyvault_lookup", log_level="DEBUG")
"""

import logging
import sys

from libs.common.logging.formatter import JSONFormatter


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    include_context: bool = True,
) -> logging.Logger:
    """Install a JSON stdout handler on the root logger.

    Existing root handlers are removed so repeated calls do not duplicate output.

    Raises:
        ValueError: If log_level is not a standard level name
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter(service_name=service_name, include_context=include_context))
    root_logger.addHandler(handler)

    # httpx logs full request URLs at INFO; keep it at WARNING unless debugging
    if numeric_level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name)
