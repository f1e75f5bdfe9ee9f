"""relaychat - a small TCP chat relay.

The server tags each connection with a display name taken from a handshake
frame and relays every later message to all other connected clients.
"""

__version__ = "1.0.0"
