"""Logging setup for the API.

Dev runs get a plain human-readable format. Every other environment gets
one ``key=value`` line per record, carrying the request and consent context
that handlers pass through ``extra``.
"""

import logging
import sys

from privacy_api.core.config import settings

# Record attributes copied into structured lines when a caller supplies them
CONTEXT_FIELDS = ("request_id", "subject_id", "action", "message_id")

# Chatty third-party loggers capped at WARNING
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class StructuredFormatter(logging.Formatter):
    """Render records as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        fields = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                fields[name] = value

        if record.exc_info:
            fields["exception"] = self.formatException(record.exc_info)

        return " ".join(f"{key}={value}" for key, value in fields.items())


def setup_logging(level: str | None = None, structured: bool | None = None) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        level: Level name (defaults to ``settings.log_level``)
        structured: Force the key=value format on or off (defaults to on
            outside dev)
    """
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    if structured is None:
        structured = not settings.is_dev

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(StructuredFormatter() if structured else logging.Formatter(PLAIN_FORMAT))
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
