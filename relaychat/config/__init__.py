from .config import (
    CLIENT_HOST,
    LOG_LEVEL,
    MAX_FRAME_SIZE,
    MAX_NAME_LENGTH,
    PREFERRED_PORT,
    SERVER_HOST,
    SERVER_PORT_AUTO_FALLBACK,
)
from .logs import configure_logging
from .ports import find_available_port

__all__ = [
    "CLIENT_HOST",
    "LOG_LEVEL",
    "MAX_FRAME_SIZE",
    "MAX_NAME_LENGTH",
    "PREFERRED_PORT",
    "SERVER_HOST",
    "SERVER_PORT_AUTO_FALLBACK",
    "configure_logging",
    "find_available_port",
]
