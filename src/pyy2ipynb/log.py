"""Log sink setup for the command-line entry point."""

import sys

from loguru import logger


def configure_logging(level: str = "WARNING") -> None:
    """Route loguru output to stderr at the given level.

    Args:
        level: Minimum level name (e.g. "DEBUG", "INFO", "WARNING")
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )
