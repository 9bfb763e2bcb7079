"""Contains logging configuration data."""

import sys
from pathlib import Path

from loguru import logger

# Logger printing formats
DEFAULT_FORMAT = "<level>{level}</level>: {message}"
DEBUG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <7}</level> | "
    "<cyan>{name}:{line}</cyan> | "
    "{message}"
)


def setup_logging(
    filename: str | Path | None = None,
    level: str = "INFO",
    verbose: bool = False,
) -> None:
    """Configures logging to file and console.

    Parameters
    ----------
    filename : str | Path | None
        log filename
    level : str, optional
        change default level of logging.
    verbose :  bool
        include timestamps and source locations in console messages.
    """
    logger.remove()
    logger.enable("powersys")
    logger.add(sys.stderr, level=level, format=DEBUG_FORMAT if verbose else DEFAULT_FORMAT)
    if filename:
        logger.add(filename, level=level, format=DEBUG_FORMAT)
