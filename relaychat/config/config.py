"""Runtime configuration for relaychat.

Loads environment variables (and a local .env file, if present) for the
server bind address, the client target, and protocol limits.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Server connection configuration
SERVER_HOST = os.environ.get("SERVER_HOST", "0.0.0.0")
PREFERRED_PORT = int(os.environ.get("SERVER_PORT", 12345))
SERVER_PORT_AUTO_FALLBACK = os.environ.get(
    "SERVER_PORT_AUTO_FALLBACK", "false").lower() == "true"

# Client target (the server the console client connects to)
CLIENT_HOST = os.environ.get("HOST", "127.0.0.1")

# Protocol limits
MAX_FRAME_SIZE = int(os.environ.get("MAX_FRAME_SIZE", 64 * 1024))
MAX_NAME_LENGTH = int(os.environ.get("MAX_NAME_LENGTH", 32))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
