"""Error types raised by the relaychat transport and session layers.

Only TransportError is meant to reach an operator; everything else is
handled at the session boundary and ends that one connection.
"""


class ChatError(Exception):
    """Base class for relaychat errors."""


class TransportError(ChatError):
    """Connect, bind or accept failed."""


class DecodeError(ChatError):
    """A frame could not be read or decoded."""


class FrameTooLarge(DecodeError):
    """A frame length exceeds the configured maximum."""

    def __init__(self, length, max_size):
        super().__init__(f"Frame too large: {length} > {max_size}")
        self.length = length
        self.max_size = max_size


class HandshakeError(DecodeError):
    """The first frame on a connection is not a usable handshake."""


class PeerClosed(ChatError):
    """The remote end closed or reset the connection."""


class SendFailure(ChatError):
    """Writing a frame to a peer failed."""
