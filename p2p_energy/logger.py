"""
Logging configuration for the P2P Energy Marketplace.
"""

import logging
import os
import sys
from typing import Optional

LOG_LEVEL_ENV = "P2P_ENERGY_LOG_LEVEL"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(name: str = "p2p_energy",
                  level: Optional[str] = None) -> logging.Logger:
    """Attach a single console handler to the package logger.

    Module loggers created with ``logging.getLogger(__name__)`` inside the package
    propagate to this logger.

    Args:
        name: Logger name (default: package root logger)
        level: Level name, falls back to the P2P_ENERGY_LOG_LEVEL environment variable, then INFO

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    level_name = (level or os.environ.get(LOG_LEVEL_ENV, "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    logger.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    logger.addHandler(console_handler)
    return logger
