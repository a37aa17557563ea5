"""
Loguru setup for applications embedding the assistant SDK.

SDK modules log through `logging.getLogger(__name__)` and never configure
handlers themselves. `setup_logging` sends those records to one Loguru sink,
at the level given or the `ASSISTANT_LOG_LEVEL` of the settings.
"""

import logging
import sys
from typing import TextIO

from loguru import logger

from assistant_core.settings import AssistantSettings

SDK_LOGGER_NAME = "assistant_core"

LOG_FORMAT = "<level>{level: <8}</level> | <green>{time:HH:mm:ss}</green> | <level>{message}</level>"
DEBUG_LOG_FORMAT = (
    "<level>{level: <8}</level> | <green>{time:HH:mm:ss}</green> | "
    "<cyan>{extra[logger_name]}</cyan> | <level>{message}</level>"
)


class LoguruInterceptHandler(logging.Handler):
    """Forward standard logging records to Loguru under their logger name."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(exception=record.exc_info).bind(logger_name=record.name).log(
            level, record.getMessage()
        )


def intercept_standard_logging() -> None:
    """Route standard logging through Loguru. Call after Loguru is configured."""
    logging.basicConfig(handlers=[LoguruInterceptHandler()], level=0, force=True)


def setup_logging(
    level: str | None = None,
    sink: TextIO | None = None,
    *,
    settings: AssistantSettings | None = None,
) -> None:
    """Configure Loguru and intercept standard logging.

    Args:
        level: Minimum level. Defaults to `settings.log_level`.
        sink: Stream to write to. Defaults to a colorized stderr.
        settings: Settings to read the level from, loaded from the
            environment when omitted.
    """
    if level is None:
        level = (settings or AssistantSettings.from_env()).log_level
    level = level.upper()

    logger.remove()
    logger.configure(extra={"logger_name": SDK_LOGGER_NAME})
    logger.add(
        sink or sys.stderr,
        format=DEBUG_LOG_FORMAT if level == "DEBUG" else LOG_FORMAT,
        level=level,
        colorize=sink is None,
        diagnose=(level == "DEBUG"),
    )

    intercept_standard_logging()
