"""Logging configuration setup."""

import logging

from authio.config import config


def setup_logging(level: str = None):
    """Configure root logging from settings and return the authio logger."""
    log_level = getattr(logging, (level or config.LOG_LEVEL).upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    )
    return logging.getLogger("authio")
