"""
Centralized logging utilities for the image merge tool.

Every module logs through the shared ``logger`` defined here so that the
CLI, the interactive session and batch mode report load warnings, output
paths and the reconstruction command line in one consistent format.
"""

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logger(
        name: str = __name__,
        level: int = logging.INFO,
        formatter: logging.Formatter | None = None,
        handler: logging.Handler | None = None,
) -> logging.Logger:
    """
    Configure a logger with optional custom formatting and handler.

    Handlers are attached only once per logger name, so repeated calls
    return the same configured instance.

    Args:
        name: Logger name.
        level: Logging level (e.g., logging.INFO, logging.DEBUG).
        formatter: Optional custom formatter.
        handler: Optional custom handler.

    Returns:
        A configured logger instance.

    """
    logger_instance = logging.getLogger(name)
    logger_instance.setLevel(level)
    if not logger_instance.handlers:
        if formatter is None:
            formatter = logging.Formatter(LOG_FORMAT)
        if handler is None:
            handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        logger_instance.addHandler(handler)
        logger_instance.propagate = False
    return logger_instance


# Shared logger used across modules
logger = setup_logger("image_merge")
