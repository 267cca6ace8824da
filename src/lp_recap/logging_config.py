"""Structured logging configuration using structlog."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Any

import structlog
from structlog.types import Processor

from lp_recap.config import Settings

# Third-party loggers that are chatty at INFO
NOISY_LOGGERS = ("discord", "aiohttp.access", "sqlalchemy.engine")


def _build_handlers(settings: Settings, level: int) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_file is None:
        return handlers

    settings.log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        settings.log_file,
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    handlers.append(file_handler)
    return handlers


def configure_logging(settings: Settings) -> None:
    """Configure structured logging for the application.

    structlog events are rendered to a single line and handed to the standard
    library, so they share handlers (stdout and the optional rotating file)
    with discord.py, aiohttp and SQLAlchemy.

    Args:
        settings: Application settings (log level and optional log file)
    """
    level = getattr(logging, settings.log_level)

    logging.basicConfig(
        format="%(message)s",
        handlers=_build_handlers(settings, level),
        level=level,
        force=True,
    )
    if settings.log_level != "DEBUG":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    # Pretty console output while debugging, JSON lines otherwise
    if settings.log_level == "DEBUG":
        renderer: Processor = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
        processors = [*shared_processors, renderer]
    else:
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Get a logger instance with optional initial context.

    Args:
        name: Logger name (typically __name__ of the module)
        **initial_context: Initial context to bind to the logger

    Returns:
        A bound structlog logger
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
