"""
Structured logging configuration using structlog.

JSON logs outside development, colored console output in development.
Every event carries the app name and environment; currency fields are
shown at cent precision.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from rmc.config.settings import get_settings

# Event keys holding currency amounts
CURRENCY_KEYS = frozenset({
    "price",
    "old_price",
    "new_price",
    "total_cost",
    "price_per_unit",
})


def add_service_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Stamp the service name, version and environment on every event."""
    settings = get_settings()
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("service_version", settings.app_version)
    event_dict.setdefault("env", settings.environment)
    return event_dict


def round_currency(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Render float currency fields with 2 decimals."""
    for key in CURRENCY_KEYS.intersection(event_dict):
        value = event_dict[key]
        if isinstance(value, float):
            event_dict[key] = round(value, 2)
    return event_dict


def configure_logging(json_logs: bool | None = None, level: str | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        json_logs: Force JSON output on or off (default: off in development)
        level: Override the configured log level
    """
    settings = get_settings()
    if json_logs is None:
        json_logs = settings.environment != "development"

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        round_currency,
        add_service_context,
    ]

    if json_logs:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, (level or settings.log_level).upper()),
        force=True,
    )

    for name in ("aiosqlite", "httpx", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Module loggers are created as ``logger = get_logger(__name__)``."""
    return structlog.get_logger(name)
