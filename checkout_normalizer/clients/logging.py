"""Structured logging utilities."""

import json
import logging
from typing import Any, Dict, Optional

_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "taskName", "exc_info", "exc_text", "stack_info",
}


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with JSON formatting configured."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def log_normalization(
    logger: logging.Logger,
    stage: str,
    field_counts: Dict[str, int],
    duration_ms: int,
    request_id: Optional[str] = None,
) -> None:
    """Log one record-level normalization pass."""
    extra: Dict[str, Any] = {
        "stage": stage,
        "field_counts": field_counts,
        "duration_ms": duration_ms,
    }
    if request_id:
        extra["request_id"] = request_id
    logger.info(f"Normalization {stage} completed", extra=extra)


def log_config_load(
    logger: logging.Logger,
    config_version: str,
    strategy: str,
) -> None:
    """Log the configuration the service started with."""
    logger.info(
        "Normalizer configured",
        extra={
            "stage": "config_load",
            "config_version": config_version,
            "uppercase_strategy": strategy,
        },
    )
