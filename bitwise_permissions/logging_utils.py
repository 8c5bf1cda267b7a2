"""
Structured JSON logging for authorization decisions.

Every record is one JSON line. Decision fields (``bundle``, ``permission``,
``reason``, ``allowed`` and the resolved level as ``permission_level``) are
promoted to top-level keys so log stores can index them. Any other ``extra``
values go under ``context``.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Record attribute -> output key. The resolved level is renamed so it cannot
# clobber the log level.
DECISION_FIELDS = {
    "bundle": "bundle",
    "permission": "permission",
    "level": "permission_level",
    "reason": "reason",
    "allowed": "allowed",
}

_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class StructuredJsonFormatter(logging.Formatter):
    """
    Formats permission log records as single-line JSON.

    Output keys, in order:
    - timestamp, level, logger, message
    - any decision field present on the record
    - context: remaining ``extra`` values, when there are any
    - exception: formatted traceback, when there is one
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        for field, key in DECISION_FIELDS.items():
            if field in extras:
                log_obj[key] = _jsonable(extras.pop(field))
        if extras:
            log_obj["context"] = {key: _jsonable(value) for key, value in extras.items()}

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


def configure_structured_logging(
    level: int | str = logging.INFO,
    logger_name: str | None = None,
) -> logging.Logger:
    """
    Configure structured JSON logging.

    Args:
        level: Logging level or level name (default: INFO)
        logger_name: Specific logger to configure (default: root logger)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())

    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    return logger


def get_permissions_logger(name: str) -> logging.Logger:
    """
    Get a logger for permission components with consistent naming.

    Args:
        name: Component name (e.g., 'registry', 'config')

    Returns:
        Logger instance with name 'bitwise_permissions.{name}'
    """
    return logging.getLogger(f"bitwise_permissions.{name}")


class BundleLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds bundle context to all log messages.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Add extra context to log record."""
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs
