"""loguru setup for ESGenius.

Log records never go to stdout: the CLI prints tables and translated JSON
there, so logs are written to stderr (colorized console lines on a TTY,
JSON otherwise) and, when LOG_FILE is set, to a rotating JSON file.
"""

import logging
import sys
from typing import Optional

from loguru import logger

from esgenius.config.settings import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | <level>{message}</level>"
)

# PDF parsing and HTTP libraries log per page / per request through stdlib logging
NOISY_LOGGERS = ("pdfminer", "pdfplumber", "httpx", "httpcore")


def configure_logging(level: Optional[str] = None) -> None:
    """
    (Re)configure loguru sinks from settings.

    Args:
        level: Override for settings.log_level
    """
    level = (level or settings.log_level).upper()

    logger.remove()
    logger.configure(extra={"component": "esgenius"})

    if sys.stderr.isatty() and settings.log_format.lower() == "console":
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)
    else:
        logger.add(sys.stderr, format="{message}", level=level, serialize=True, diagnose=False)

    if settings.log_file is not None:
        logger.add(
            settings.log_file,
            level=level,
            serialize=True,
            rotation="10 MB",
            retention=5,
            diagnose=False,
        )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(component: str):
    """Logger bound to a component name, e.g. get_logger("cli")."""
    return logger.bind(component=component)


configure_logging()

__all__ = ["logger", "get_logger", "configure_logging"]
