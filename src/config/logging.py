"""
Structured logging configuration using structlog.

Development gets colored console output; every other environment gets one
JSON object per line. Request-scoped values (request id, acting user) live
in structlog context vars so events emitted by services during a request
carry them without being passed around.
"""

import logging
import sys
from collections.abc import Callable
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from src.config.settings import get_settings

_QUIET_LOGGERS = ("aiosqlite", "httpx", "httpcore", "uvicorn.access")


def _app_context(app: str, version: str, environment: str) -> Callable[..., EventDict]:
    def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", app)
        event_dict.setdefault("version", version)
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_app_context


def drop_none_values(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Omit keys logged as None (optional ids, missing tracebacks)."""
    return {k: v for k, v in event_dict.items() if v is not None}


def configure_logging(log_level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        log_level: Overrides settings.log_level
        json_logs: Force JSON (True) or console (False) rendering; by default
            JSON is used outside development
    """
    settings = get_settings()
    level = getattr(logging, (log_level or settings.log_level).upper())
    if json_logs is None:
        json_logs = settings.environment != "development"

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _app_context(settings.app_name, settings.app_version, settings.environment),
        drop_none_values,
    ]
    if json_logs:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_request_context(**values: Any) -> None:
    """Bind values to every log event emitted for the current request."""
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
