from .errors import (
    ChatError,
    DecodeError,
    FrameTooLarge,
    HandshakeError,
    PeerClosed,
    SendFailure,
    TransportError,
)
from .protocol import (
    CONNECT_PREFIX,
    encode_handshake,
    format_chat,
    format_joined,
    format_left,
    is_handshake,
    parse_handshake,
    read_frame,
    write_frame,
)
from .registry import Registry

__all__ = [
    "ChatError",
    "DecodeError",
    "FrameTooLarge",
    "HandshakeError",
    "PeerClosed",
    "SendFailure",
    "TransportError",
    "CONNECT_PREFIX",
    "encode_handshake",
    "format_chat",
    "format_joined",
    "format_left",
    "is_handshake",
    "parse_handshake",
    "read_frame",
    "write_frame",
    "Registry",
]
