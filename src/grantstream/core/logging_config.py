"""
GrantStream - Structured Logging Configuration

Emits one JSON object per record so treasury and grant events can be shipped
to a log aggregator. Fields passed through ``extra={...}`` (for example
``event``, ``grant_id``, ``amount``) become top-level JSON keys.

Usage:
    from grantstream.core.logging_config import setup_logging

    logger = setup_logging(name="grantstream", level="INFO")
    logger.info("Stream created", extra={"event": "stream.created", "amount": 1000})
"""

import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from grantstream.core.config import GrantConfig


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that stamps service, environment and source location."""

    def __init__(
        self,
        fmt: str = "%(timestamp)s %(level)s %(name)s %(message)s",
        timestamp: bool = True,
        environment: Optional[str] = None,
        service_name: str = "grantstream",
    ):
        super().__init__(fmt=fmt)
        self.timestamp = timestamp
        self.environment = environment or "development"
        self.service_name = service_name

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        if self.timestamp and not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat()

        log_record["environment"] = self.environment
        log_record["service"] = self.service_name

        if not log_record.get("level"):
            log_record["level"] = record.levelname.lower()

        log_record["source"] = {
            "function": record.funcName,
            "module": record.module,
            "line": record.lineno,
        }


def setup_logging(
    name: str = "grantstream",
    log_file: Optional[str] = None,
    level: str = "INFO",
    environment: str = "development",
    enable_console: bool = True,
    max_bytes: int = 50 * 1024 * 1024,  # 50MB
    backup_count: int = 5,
) -> logging.Logger:
    """
    Configure structured JSON logging for a logger hierarchy.

    Args:
        name: Logger name (``grantstream`` covers every module)
        log_file: Optional path of a rotating JSON log file
        level: Logging level name
        environment: Environment identifier stamped on each record
        enable_console: Whether to log to stdout
        max_bytes: Maximum log file size before rotation
        backup_count: Number of rotated files to keep

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    formatter = CustomJsonFormatter(
        environment=environment,
        service_name=name.split(".")[0],
    )

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def setup_logging_from_config(config: GrantConfig) -> logging.Logger:
    """Configure the ``grantstream`` logger from a loaded config."""
    return setup_logging(
        name="grantstream",
        log_file=config.log_file,
        level=config.log_level,
        environment=config.environment,
    )


def get_logger(name: str, level: str = "INFO") -> logging.Logger:
    """Get a logger, configuring it with JSON output if nothing has yet."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        return setup_logging(name=name, level=level)
    return logger
