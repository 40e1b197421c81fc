"""
Logging helpers shared by the API routes and core modules
"""

import logging
import sys

from core.config import settings

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger writing to stderr at the configured level"""
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)

    logger.setLevel(settings.log_level.upper())
    return logger
