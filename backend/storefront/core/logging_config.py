"""
Structured logging for the store API.

Production logs are single-line JSON on stdout, one object per record:
timestamp, level, logger, message, plus whatever the call site passed in
``extra`` (request_id, order_id, user_id, latency_ms and so on). Customer
contact details passed as ``email`` or ``phone`` extras are masked before
they are written.

Set LOG_JSON=false for a human readable format during local development.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName",
})

NOISY_LOGGERS = ("httpx", "httpcore", "asyncio", "sqlalchemy.engine", "aiosqlite")

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def mask_email(value: str) -> str:
    """``driver@example.com`` -> ``d***@example.com``"""
    local, sep, domain = value.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"


def mask_phone(value: str) -> str:
    """Keep the last four digits only."""
    return f"***{value[-4:]}" if len(value) > 4 else "***"


_MASKERS = {"email": mask_email, "phone": mask_phone}


class JSONFormatter(logging.Formatter):
    """
    Render a LogRecord as one JSON object.

    Example output:
        {"timestamp": "2026-10-18T10:30:00.123456+00:00", "level": "INFO",
         "message": "Order recorded", "logger": "storefront.services.checkout",
         "order_id": "6f1c...", "total_amount": 4999.0, "request_id": "abc-123"}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_data["stack_info"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in log_data or value is None:
                continue
            masker = _MASKERS.get(key)
            log_data[key] = masker(str(value)) if masker else value

        return json.dumps(log_data, default=str)


def setup_logging(level: str = "INFO", json_format: bool = True) -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        level: Level name; unknown names fall back to INFO
        json_format: JSONFormatter when True, PLAIN_FORMAT otherwise

    Note:
        Called once from the application lifespan. Existing root handlers
        are replaced so reloads do not duplicate output.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(
        JSONFormatter() if json_format else logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
