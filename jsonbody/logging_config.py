"""
logging_config.py - Centralized logging configuration for jsonbody

Sets up Loguru as the single logging backend. Intercepts Python's stdlib
logging module so records from the host server (uvicorn, starlette) and
from any getLogger() caller route through Loguru as well.

Business Rules:
- All library logs go through Loguru
- JSON lines when JSONBODY_LOG_JSON is set, for machine parsing
- Human-readable colourised format otherwise
- JSONBODY_LOG_LEVEL sets the minimum level

Called by: the host application, once at startup
Depends on: jsonbody/config.py
"""

import logging
import sys

from loguru import logger

from .config import Settings, get_settings


def setup_logging(settings: Settings | None = None) -> None:
    """Configure Loguru and intercept stdlib logging.

    Call once at app startup, before the server starts accepting requests.
    """
    settings = settings or get_settings()
    logger.remove()

    log_level = settings.log_level.upper()

    if settings.log_json:
        logger.add(
            sys.stdout,
            level=log_level,
            format="{message}",
            serialize=True,
        )
    else:
        logger.add(
            sys.stdout,
            level=log_level,
            format=(
                "<green>{time:HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "{message}"
            ),
            colorize=True,
        )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    for noisy in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.info("Logging configured", level=log_level, json=settings.log_json)


class _InterceptHandler(logging.Handler):
    """Route stdlib logging records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip frames from stdlib logging internals
        frame, depth = logging.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )
