"""
Structured logging for stockroom, built on structlog.

Domain services log plain events with keyword fields (``batch_id``,
``product_id``, quantities, statuses). The processors below turn those
fields into stable, JSON-safe values and tag every line with the service
component that emitted it. Development gets the coloured console renderer,
every other environment gets one JSON object per line on stderr.
"""

import logging
import sys
from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from stockroom.config.settings import Settings, get_settings

_PACKAGE_PREFIX = "stockroom."


def app_context(settings: Settings) -> Processor:
    """Stamp each event with the app name and environment.

    Values are captured once, when logging is configured.
    """
    context = {"app": settings.app_name, "environment": settings.environment}

    def _add(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        for key, value in context.items():
            event_dict.setdefault(key, value)
        return event_dict

    return _add


def add_component(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """``stockroom.domain.service.batch_ledger`` -> ``batch_ledger``."""
    name = event_dict.get("logger")
    if isinstance(name, str) and name.startswith(_PACKAGE_PREFIX):
        event_dict["component"] = name.rsplit(".", 1)[-1]
    return event_dict


def render_domain_values(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Render Decimals, enums, dates and paths as plain strings.

    Money amounts stay exact (``Decimal("12.50")`` logs as ``"12.50"``)
    and order/batch statuses log by value.
    """
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = str(value)
        elif isinstance(value, Enum):
            event_dict[key] = value.value
        elif isinstance(value, date):
            event_dict[key] = value.isoformat()
        elif isinstance(value, Path):
            event_dict[key] = str(value)
    return event_dict


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog for the application."""
    settings = settings or get_settings()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_component,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        app_context(settings),
        render_domain_values,
    ]

    if settings.environment == "development":
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=True)]
    else:
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # stdout belongs to CLI output
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, settings.log_level),
    )
    # webhook deliveries log through stockroom's notifier, not httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
