"""
Logging infrastructure.

Provides logging utilities for scripts and other entry points that do not go
through the API's basicConfig.
"""
import logging


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Get logger instance.

    Args:
        name: Logger name (usually module name)
        level: Level applied when the logger is first configured

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger
