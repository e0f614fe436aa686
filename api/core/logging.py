"""
Logging configuration for the API.

Every record, whether it comes from a structlog logger or a plain
``logging.getLogger`` one (uvicorn, openai, main.py), is rendered by the same
structlog chain. The request middleware binds ``request_id`` and
``session_id`` with ``structlog.contextvars``, so they show up as fields on
every line logged while a request is handled.

Usage:
    from middleware.logging_middleware import get_logger
    logger = get_logger(__name__)

    logger.info("Calculating wastage", placed_tiles=3)
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

import structlog
from structlog.typing import Processor

from core.config import settings

NOISY_LOGGERS = ("uvicorn.access", "uvicorn.error", "httpx", "httpcore", "openai")


def _pre_chain() -> List:
    """Processors shared by structlog and foreign (stdlib) records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def build_formatter(renderer: Optional[Processor] = None) -> structlog.stdlib.ProcessorFormatter:
    """
    Formatter rendering stdlib records through structlog.

    Args:
        renderer: Final processor; JSON or console per settings.log_format when omitted
    """
    if renderer is None:
        if settings.log_format == "json":
            renderer = structlog.processors.JSONRenderer()
        else:
            renderer = structlog.dev.ConsoleRenderer(colors=True, exception_formatter=structlog.dev.plain_traceback)

    processors = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    # ConsoleRenderer prints tracebacks itself
    if not isinstance(renderer, structlog.dev.ConsoleRenderer):
        processors.append(structlog.processors.format_exc_info)
    processors.append(renderer)

    return structlog.stdlib.ProcessorFormatter(foreign_pre_chain=_pre_chain(), processors=processors)


def setup_logging():
    """Configure structlog and the root logger for the application."""

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_pre_chain(),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(build_formatter())
    root_logger.addHandler(console_handler)

    if settings.environment == "production":
        log_dir = Path("logs")
        log_dir.mkdir(exist_ok=True)

        # Files are always JSON so they can be shipped as-is
        file_handler = RotatingFileHandler(log_dir / "api.log", maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(build_formatter(structlog.processors.JSONRenderer()))
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.stdlib.get_logger(__name__).info(
        "Logging configured",
        log_level=settings.log_level,
        log_format=settings.log_format,
        environment=settings.environment,
    )
