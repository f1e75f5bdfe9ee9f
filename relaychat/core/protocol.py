"""Wire protocol for relaychat.

Every message travels as one frame: a 4-byte big-endian unsigned length
followed by that many payload bytes. The first frame a client sends is the
handshake, ``__CONNECT__`` immediately followed by the UTF-8 display name.
Everything after that is chat text, relayed verbatim.
"""

import struct

from relaychat.config import MAX_FRAME_SIZE, MAX_NAME_LENGTH
from relaychat.core.errors import DecodeError, FrameTooLarge, HandshakeError, PeerClosed

LENGTH_STRUCT = struct.Struct(">I")
HEADER_SIZE = LENGTH_STRUCT.size

CONNECT_PREFIX = b"__CONNECT__"
CHAT_SEPARATOR = b" : "


def recv_exactly(sock, size):
    """Read exactly `size` bytes from a socket.

    Keeps calling recv for the bytes still needed, so a frame split across
    several TCP segments is reassembled in order.

    Raises:
        PeerClosed: if the peer closes or resets before `size` bytes arrive
        DecodeError: on any other socket error
    """
    buf = bytearray()
    while len(buf) < size:
        try:
            chunk = sock.recv(size - len(buf))
        except ConnectionError as exc:
            raise PeerClosed(str(exc)) from exc
        except OSError as exc:
            raise DecodeError(f"Stream error: {exc}") from exc
        if not chunk:
            raise PeerClosed("Connection closed by peer")
        buf += chunk
    return bytes(buf)


def read_frame(sock, max_size=MAX_FRAME_SIZE):
    """Read one length-prefixed frame and return its payload.

    Blocks until the whole frame has arrived. The length is checked before
    the body is read so a hostile prefix can't make us buffer arbitrary data.

    Raises:
        PeerClosed: if the stream ends
        FrameTooLarge: if the declared length exceeds max_size
        DecodeError: on other stream errors
    """
    (length,) = LENGTH_STRUCT.unpack(recv_exactly(sock, HEADER_SIZE))
    if length > max_size:
        raise FrameTooLarge(length, max_size)
    if length == 0:
        return b""
    return recv_exactly(sock, length)


def write_frame(sock, payload, max_size=MAX_FRAME_SIZE):
    """Write `payload` as one frame.

    Header and body go out in a single sendall call. Callers sharing a
    socket between threads must hold that socket's write lock.

    Raises:
        FrameTooLarge: if the payload exceeds max_size
        OSError: if the socket write fails
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    if len(payload) > max_size:
        raise FrameTooLarge(len(payload), max_size)
    sock.sendall(LENGTH_STRUCT.pack(len(payload)) + payload)


def encode_handshake(name):
    return CONNECT_PREFIX + name.encode("utf-8")


def is_handshake(payload):
    return payload.startswith(CONNECT_PREFIX)


def parse_handshake(payload, max_name_length=MAX_NAME_LENGTH):
    """Extract the display name from a handshake frame.

    Raises:
        HandshakeError: if the marker is missing, or the name is blank,
            too long, or not valid UTF-8
    """
    if not is_handshake(payload):
        raise HandshakeError("Missing handshake marker")
    try:
        name = payload[len(CONNECT_PREFIX):].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HandshakeError("Display name is not valid UTF-8") from exc
    if not name.strip():
        raise HandshakeError("Empty display name")
    if len(name) > max_name_length:
        raise HandshakeError(
            f"Display name too long: {len(name)} > {max_name_length}")
    return name


def format_chat(name, payload):
    """Build the broadcast payload for a chat message: ``<name> : <payload>``."""
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return name.encode("utf-8") + CHAT_SEPARATOR + payload


def format_joined(name):
    return f"{name} connected.".encode("utf-8")


def format_left(name):
    return f"{name} disconnected.".encode("utf-8")
