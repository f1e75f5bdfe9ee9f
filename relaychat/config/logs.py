"""Logging setup shared by the server and client entry points."""

import logging

from .config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def configure_logging(level=LOG_LEVEL):
    """Configure root logging once for a relaychat process.

    Args:
        level: Level name (e.g. "INFO", "DEBUG") or numeric logging level
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
