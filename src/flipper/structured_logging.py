"""Structured logging configuration.

Features:
- JSON formatted logs for aggregation
- Feature name context for log lines emitted while evaluating a feature
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

from flipper.config import FlipperSettings, get_settings

feature_var: ContextVar[Optional[str]] = ContextVar("feature", default=None)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(
        self,
        service_name: str = "feature-flipper",
        environment: str = "production",
        include_stack_trace: bool = True,
    ):
        super().__init__()
        self.service_name = service_name
        self.environment = environment
        self.include_stack_trace = include_stack_trace

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "environment": self.environment,
        }

        if feature := feature_var.get():
            log_entry["feature"] = feature

        if hasattr(record, "extra_fields"):
            log_entry["extra"] = record.extra_fields

        if record.exc_info and self.include_stack_trace:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_entry, default=str)


def setup_structured_logging(
    service_name: str = "feature-flipper",
    environment: str = "production",
    level: int = logging.INFO,
    json_output: bool = True,
) -> None:
    """Configure the ``flipper`` logger hierarchy."""
    package_logger = logging.getLogger("flipper")
    package_logger.setLevel(level)

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    if json_output:
        formatter: logging.Formatter = StructuredFormatter(
            service_name=service_name,
            environment=environment,
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)


def setup_logging_from_settings(settings: Optional[FlipperSettings] = None) -> None:
    """Configure logging from FlipperSettings (defaults to the cached settings)."""
    settings = settings or get_settings()
    setup_structured_logging(
        service_name=settings.SERVICE_NAME,
        environment=settings.ENVIRONMENT,
        level=logging.getLevelName(settings.LOG_LEVEL),
        json_output=settings.JSON_LOGS,
    )


@contextmanager
def feature_context(name: str) -> Iterator[None]:
    """Tag log lines emitted inside the block with a feature name."""
    token = feature_var.set(name)
    try:
        yield
    finally:
        feature_var.reset(token)


__all__ = [
    "StructuredFormatter",
    "feature_context",
    "feature_var",
    "setup_logging_from_settings",
    "setup_structured_logging",
]
