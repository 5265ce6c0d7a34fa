"""Structured logging using structlog.

Provides one logging configuration for every UAIntel consumer.
Supports both JSON (production) and console (development) formats.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from uaintel.common.config import LoggingSettings, Settings, get_settings


class ServiceContext:
    """Processor adding service name, version and environment to log entries.

    The values are read once, when logging is configured.
    """

    def __init__(self, app_settings: Settings) -> None:
        self.context = {
            "service": app_settings.app_name,
            "version": app_settings.app_version,
            "environment": app_settings.environment,
        }

    def __call__(
        self,
        logger: structlog.types.WrappedLogger,
        method_name: str,
        event_dict: dict[str, Any],
    ) -> dict[str, Any]:
        event_dict.update(self.context)
        return event_dict


def setup_logging(
    settings: LoggingSettings | None = None,
    app_settings: Settings | None = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        settings: Logging settings. Defaults to ``app_settings.logging``.
        app_settings: Application settings supplying the service context.
            Uses global settings if not provided.
    """
    if app_settings is None:
        app_settings = get_settings()
    if settings is None:
        settings = app_settings.logging

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.include_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if settings.include_caller:
        shared_processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ))

    shared_processors.append(ServiceContext(app_settings))

    if settings.format == "json":
        format_processors: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        format_processors = [
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.rich_traceback,
            ),
        ]

    structlog.configure(
        processors=shared_processors + format_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.level),
    )


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (usually __name__).
        **initial_context: Initial context to bind to the logger.

    Returns:
        Configured structlog logger.

    Example:
        logger = get_logger(__name__, table="client_regex")
        logger.debug("Pattern matched", row=12)
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


class LoggerMixin:
    """Mixin class to add a logger to any class.

    Example:
        class Parser(LoggerMixin):
            def connect(self):
                self.logger.info("Dataset connected")
    """

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        """Get logger bound to this class."""
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger
