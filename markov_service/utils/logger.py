"""
Logging helpers shared by the service entry points.
"""

import logging
import sys
from typing import Optional

from markov_service.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logger(name: str, level: Optional[str] = None, propagate: bool = False) -> logging.Logger:
    """
    Get a logger with a stream handler attached.

    Args:
        name: Logger name, usually __name__
        level: Level name; defaults to settings.LOG_LEVEL
        propagate: Keep passing records up to ancestor loggers
    """
    logger = logging.getLogger(name)
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.propagate = propagate

    return logger
