"""Logging setup for the raymarch package.

Modules log through ``logging.getLogger(__name__)``, so every logger in
the package is a child of ``raymarch``. Applications call setup_logging
once to attach handlers to that parent; the library itself never does.

Example:
    >>> import logging
    >>> from raymarch.logging_config import setup_logging
    >>> setup_logging(logging.DEBUG, log_file="cast.log")
"""

import logging
import sys

# Namespace shared by all package loggers
PACKAGE_LOGGER = "raymarch"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: int = logging.INFO, log_file: str | None = None) -> logging.Logger:
    """Attach console and optional file handlers to the package logger.

    Calling this again replaces the handlers from the previous call.

    Args:
        level: Threshold for the logger and its handlers, e.g. logging.DEBUG.
        log_file: Path of a file to also write records to. The file is
            truncated.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.info("Logging initialized.")
    return logger
