"""Port selection for the relaychat server.

Finds a bindable TCP port for the listener, optionally walking forward from
the preferred port when it is already taken.
"""

import socket

from .config import PREFERRED_PORT, SERVER_HOST, SERVER_PORT_AUTO_FALLBACK


def _can_bind(host, port):
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as test_socket:
            test_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            test_socket.bind((host, port))
        return True
    except OSError:
        return False


def find_available_port(start_port=PREFERRED_PORT, host=SERVER_HOST, max_attempts=50,
                        allow_fallback=SERVER_PORT_AUTO_FALLBACK):
    """Find an available TCP port for the chat server.

    Attempts to bind a socket starting from start_port and incrementing
    until an available port is found or max_attempts is reached.

    Args:
        start_port: Port number to start search from
        host: Interface the server will listen on
        max_attempts: Maximum number of ports to try
        allow_fallback: If True, search multiple ports; if False, try only start_port

    Returns:
        Available port number, or None if no port found
    """
    if not allow_fallback:
        return start_port if _can_bind(host, start_port) else None

    for port in range(start_port, min(start_port + max_attempts, 65536)):
        if _can_bind(host, port):
            return port
    return None
