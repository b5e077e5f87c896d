"""Logging setup for the finplan command line."""

import logging
import sys
from datetime import datetime, UTC
from typing import Any

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "finplan"
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with timestamp, level and service metadata."""

    def add_fields(
        self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(UTC).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = SERVICE_NAME


def setup_logging(level: str = "WARNING", json_format: bool = False) -> None:
    """Configure the root logger.

    Args:
        level: Level name such as "INFO" or "DEBUG"
        json_format: Emit one JSON object per record instead of plain text
    """
    logger = logging.getLogger()
    logger.setLevel(level.upper())

    # Remove existing handlers
    logger.handlers.clear()

    # stderr keeps command output on stdout clean
    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    logger.addHandler(handler)
