"""Structured logging for PolicyHub.

Every entry goes through one structlog processor chain. Application code
logs key/value events with ``structlog.get_logger()``. Standard library
records (uvicorn, SQLAlchemy) are rendered by the same chain, so the output
is uniform: JSON in production, coloured console lines elsewhere.
"""
# ruff: noqa: ARG001  # Processor signatures required by structlog API

import logging
import sys
from typing import Any, Literal

import structlog
from structlog.types import EventDict, Processor

from policyhub.config.settings import Settings, get_settings
from policyhub.core.context import get_current_context_or_none

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Loggers that install their own handlers unless told otherwise
_ADOPTED_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "sqlalchemy")


def add_request_context(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag the entry with the request id and, once known, the acting user."""
    ctx = get_current_context_or_none()
    if ctx is None:
        return event_dict

    event_dict["request_id"] = str(ctx.request_id)
    if ctx.user_id is not None:
        event_dict["user_id"] = ctx.user_id
        event_dict["organization_id"] = ctx.organization_id
    return event_dict


def drop_color_message_key(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """uvicorn duplicates its message under ``color_message``."""
    event_dict.pop("color_message", None)
    return event_dict


def _environment_tagger(environment: str) -> Processor:
    def add_environment(
        logger: logging.Logger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict["environment"] = environment
        return event_dict

    return add_environment


def _processor_chain(environment: str) -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        add_request_context,
        _environment_tagger(environment),
        drop_color_message_key,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def setup_logging(
    settings: Settings | None = None,
    log_level: LogLevel | None = None,
    json_format: bool | None = None,
) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        settings: Source of the environment and default level
        log_level: Overrides ``settings.log_level``
        json_format: Overrides the production-only JSON default
    """
    settings = settings or get_settings()
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    use_json = settings.ENVIRONMENT == "production" if json_format is None else json_format

    processors = _processor_chain(settings.ENVIRONMENT)
    if use_json:
        processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in _ADOPTED_LOGGERS:
        adopted = logging.getLogger(name)
        adopted.handlers = [handler]
        adopted.propagate = False

    # SQLAlchemy echoes every statement at INFO
    for name in ("sqlalchemy", "sqlalchemy.engine"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


class LogContext:
    """Bind key/value pairs to every entry logged inside the block.

    Example:
        with LogContext(organization_id=12):
            logger.info("migrating")
    """

    def __init__(self, **bindings: Any):
        self.bindings = bindings

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.bindings)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        structlog.contextvars.unbind_contextvars(*self.bindings)


def log_exception(logger: structlog.stdlib.BoundLogger, exc: Exception, **fields: Any) -> None:
    """Log ``exc`` with its traceback under the ``exception_occurred`` event."""
    logger.exception(
        "exception_occurred", error_type=type(exc).__name__, error_message=str(exc), **fields
    )


def log_external_call(
    logger: structlog.stdlib.BoundLogger,
    service: str,
    operation: str,
    duration_ms: float,
    success: bool,
    **fields: Any,
) -> None:
    """Record one call to a third-party API; failures log at warning."""
    emit = logger.info if success else logger.warning
    emit(
        "external_call",
        service=service,
        operation=operation,
        duration_ms=round(duration_ms, 2),
        success=success,
        **fields,
    )
