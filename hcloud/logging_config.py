"""Logging setup for applications using the hcloud client."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .exceptions import Error, HcloudError, StatusError

console = Console(stderr=True)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
) -> logging.Logger:
    """
    Set up logging for the hcloud client.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file to write logs to
        json_format: Use JSON format for logs

    Returns:
        Configured logger
    """
    logger = logging.getLogger("hcloud")
    logger.setLevel(getattr(logging, level.upper()))

    # Clear existing handlers
    logger.handlers = []

    if json_format:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
    else:
        handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JsonFormatter())
        logger.addHandler(file_handler)

    return logger


class JsonFormatter(logging.Formatter):
    """JSON log formatter adding API error codes and status codes when present."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_data.update({
                "exception_type": exc_type.__name__,
                "exception_message": str(exc_value),
            })
            if isinstance(exc_value, Error):
                log_data["error_code"] = str(exc_value.code)
            elif isinstance(exc_value, StatusError):
                log_data["status_code"] = exc_value.status_code
            if isinstance(exc_value, HcloudError) and exc_value.response is not None:
                log_data["ratelimit_remaining"] = exc_value.response.meta.ratelimit.remaining

        return json.dumps(log_data)
