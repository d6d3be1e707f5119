"""
Loguru setup for the reelsmith API and scripts.

Pipeline code logs through loguru with a ``[<job id>]`` prefix taken
from RunContext.tag; uvicorn and httpx records are routed into the same sink.
"""

import logging
import sys

from loguru import logger

from reelsmith_core.config import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

# Libraries whose stdlib loggers are redirected into loguru
ROUTED_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "fastapi", "httpx")


class InterceptHandler(logging.Handler):
    """
    Forward stdlib log records to loguru at the original call site.
    See: https://loguru.readthedocs.io/en/stable/overview.html#entirely-compatible-with-standard-logging
    """

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str | None = None):
    """
    Replace loguru's default sink with a stdout sink at ``level``.

    Args:
        level: Minimum level (defaults to settings.LOG_LEVEL).
    """
    logger.remove()
    logger.add(sys.stdout, format=LOG_FORMAT, level=level or settings.LOG_LEVEL, colorize=True)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for name in ROUTED_LOGGERS:
        routed = logging.getLogger(name)
        routed.handlers = [InterceptHandler()]
        routed.propagate = False

    logger.info(f"{settings.SERVICE_NAME} logging initialized at {level or settings.LOG_LEVEL}")
