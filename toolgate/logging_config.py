"""Logging setup for toolgate.

Registry and validator code log through an injected ``logging.Logger`` and pass
structured fields via ``extra=``. ``configure_logging`` attaches a single stderr
handler that renders those fields either as JSON or as ``key=value`` pairs.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from toolgate.config import Settings, get_config

STRUCTURED_FIELDS = (
    "tool_name",
    "category",
    "tool_count",
    "total_registered",
    "category_count",
    "top_category",
    "keywords",
    "query",
    "result_count",
    "workflow",
    "input_keys",
    "missing_fields",
    "schema_type",
    "field",
    "format",
    "error",
)

_HANDLER_NAME = "toolgate-stderr"


def _structured(record: logging.LogRecord) -> dict[str, object]:
    return {key: getattr(record, key) for key in STRUCTURED_FIELDS if hasattr(record, key)}


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update(_structured(record))
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


class KeyValueFormatter(logging.Formatter):
    """Plain-text formatter that appends structured fields as key=value."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        fields = _structured(record)
        if fields:
            text += " " + " ".join(f"{key}={value}" for key, value in fields.items())
        return text


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Configure and return the toolgate logger.

    Repeated calls reconfigure the level and formatter without adding
    duplicate handlers.
    """
    settings = settings or get_config()
    logger = logging.getLogger(settings.logger_name)
    logger.setLevel(getattr(logging, settings.log_level))

    handler = next((h for h in logger.handlers if h.get_name() == _HANDLER_NAME), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        logger.addHandler(handler)
    handler.setFormatter(JSONFormatter() if settings.log_json else KeyValueFormatter())

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child of the configured toolgate logger."""
    return logging.getLogger(f"{get_config().logger_name}.{name}")
