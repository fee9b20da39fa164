"""
Logging configuration module.
Configures logging based on environment variables.
"""

import logging
import os
import sys


def setup_logging():
    """
    Configure logging based on environment variables.

    Environment variables:
        LOG_LEVEL: 0 (silent), 1 (info), 2 (debug)
        LOG_FILE: Optional file path for log output
    """
    try:
        log_level_env = int(os.environ.get("LOG_LEVEL", "0"))
    except ValueError:
        log_level_env = 0

    level_mapping = {
        0: logging.CRITICAL + 10,  # Effectively silent
        1: logging.INFO,
        2: logging.DEBUG,
    }

    log_level = level_mapping.get(log_level_env, logging.CRITICAL + 10)
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.setLevel(log_level)

    log_file = os.environ.get("LOG_FILE")
    if log_file:
        handler = logging.FileHandler(log_file, mode="a")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    # SQLAlchemy engine logging is driven by SQL_ECHO, keep it out of the registry log
    logging.getLogger("sqlalchemy.engine").setLevel(max(log_level, logging.WARNING))

    logger = logging.getLogger(__name__)
    if log_level_env > 0:
        logger.info(f"Logging configured at level {log_level_env}")
