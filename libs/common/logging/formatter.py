"""JSON log formatter with secret redaction.

Example log output:
    {
        "timestamp": "2026-10-19T10:30:00.000Z",
        "level": "INFO",
        "service": "keyvault_lookup",
        "message": "Successfully looked up secret",
        "context": {"secret_name": "db-pass", "vault": "kv1", "cache_hit": false}
    }

Values stored under sensitive keys (``value``, ``password``, ``access_token``,
...) are replaced with ``REDACTED`` and pydantic ``SecretStr`` values are
rendered masked, so a stray ``extra={"value": secret}`` never reaches the
log sink.
"""

import json
import logging
import traceback
from datetime import UTC, datetime
from types import TracebackType
from typing import Any

from pydantic import SecretBytes, SecretStr

REDACTED = "**********"

SENSITIVE_KEYS = frozenset(
    {
        "value",
        "secret",
        "secret_value",
        "password",
        "access_token",
        "token",
        "authorization",
    }
)

_RESERVED_LOGGING_FIELDS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "message",
        "asctime",
        "context",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


def redact(value: Any) -> Any:
    """Recursively mask sensitive keys and secret wrapper types."""
    if isinstance(value, SecretStr | SecretBytes):
        return REDACTED
    if isinstance(value, dict):
        return {
            key: REDACTED if str(key).lower() in SENSITIVE_KEYS else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, list | tuple):
        return [redact(item) for item in value]
    return value


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON with redacted context."""

    def __init__(
        self, service_name: str, include_context: bool = True, *args: Any, **kwargs: Any
    ) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 - matches logging API
        log_entry: dict[str, Any] = {
            "timestamp": self._format_timestamp(record.created),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_context:
            context = self._extract_context(record)
            if context:
                log_entry["context"] = redact(context)

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self._format_exception(record.exc_info),
            }

        return json.dumps(log_entry, default=str)

    def _format_timestamp(self, created: float) -> str:
        dt = datetime.fromtimestamp(created, tz=UTC)
        return dt.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    def _extract_context(self, record: logging.LogRecord) -> dict[str, Any] | None:
        # Explicit context dict wins over loose extra fields
        context = getattr(record, "context", None)
        if context and isinstance(context, dict):
            return dict(context)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_LOGGING_FIELDS
        }
        return extra or None

    def _format_exception(
        self,
        exc_info: tuple[type[BaseException] | None, BaseException | None, TracebackType | None],
    ) -> str:
        return "".join(traceback.format_exception(*exc_info))
