"""
Logging configuration.

Plain text lines for local development, JSON lines when LOG_JSON=true.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging import LogRecord
from typing import Any, Dict

# attributes every LogRecord has; anything else came in through `extra=`
_RESERVED = {
    "name", "msg", "args", "created", "filename", "funcName", "levelname",
    "levelno", "lineno", "module", "msecs", "message", "pathname", "process",
    "processName", "relativeCreated", "thread", "threadName", "exc_info",
    "exc_text", "stack_info", "taskName", "extra_fields",
}


class JSONFormatter(logging.Formatter):
    """Outputs one JSON object per record, extra fields included."""

    def format(self, record: LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        for key, value in record.__dict__.items():
            if key in _RESERVED:
                continue
            try:
                json.dumps({key: value})
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data)


class ContextFilter(logging.Filter):
    """Adds fixed context fields to every record of a logger."""

    def __init__(self, **context):
        super().__init__()
        self.context = context

    def filter(self, record: LogRecord) -> bool:
        if not hasattr(record, "extra_fields"):
            record.extra_fields = {}

        record.extra_fields.update(self.context)
        return True


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: str = None,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatting on the console
        log_file: Optional file path; the file always gets JSON lines
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level.upper()))

    if json_format:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
        )

    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(getattr(logging, level.upper()))
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str, **context) -> logging.Logger:
    """
    Get a logger, optionally tagging all its records with context.

    Example:
        logger = get_logger(__name__, component="mailer")
        logger.info("Email sent", extra={"message_id": "<...>"})
    """
    logger = logging.getLogger(name)

    if context:
        logger.addFilter(ContextFilter(**context))

    return logger
