"""Server-side session for one connected chat client.

Each accepted connection gets a Session running on its own thread. The first
frame must be a handshake that names the user; after that every frame is
relayed to the other clients as ``<name> : <message>``.
"""

import enum
import itertools
import logging
import socket
import threading

from relaychat.config import MAX_FRAME_SIZE, MAX_NAME_LENGTH
from relaychat.core.errors import DecodeError, FrameTooLarge, HandshakeError, PeerClosed, SendFailure
from relaychat.core.protocol import (
    format_chat,
    format_joined,
    format_left,
    parse_handshake,
    read_frame,
    write_frame,
)

log = logging.getLogger(__name__)

_session_ids = itertools.count(1)


class SessionState(enum.Enum):
    CONNECTED = "connected"
    IDENTIFIED = "identified"
    CLOSED = "closed"


class Session:
    """One client connection and its handler loop.

    The session owns its socket. Other handlers may call send() on it during
    a broadcast, so writes are serialized with a per-session lock.
    """

    def __init__(self, sock, address, registry, max_frame_size=MAX_FRAME_SIZE,
                 max_name_length=MAX_NAME_LENGTH):
        self.id = next(_session_ids)
        self.sock = sock
        self.address = address
        self.registry = registry
        self.display_name = None
        self.state = SessionState.CONNECTED
        self.max_frame_size = max_frame_size
        self.max_name_length = max_name_length
        self._send_lock = threading.Lock()
        self._close_lock = threading.Lock()

    def __repr__(self):
        return f"<Session {self.id} {self.display_name or '?'} {self.address}>"

    @property
    def label(self):
        return self.display_name or f"session {self.id}"

    def send(self, payload):
        """Write one frame to this client.

        Raises:
            SendFailure: if the payload is over this client's frame limit
                or the socket write fails
        """
        with self._send_lock:
            try:
                write_frame(self.sock, payload, self.max_frame_size)
            except (OSError, FrameTooLarge) as exc:
                raise SendFailure(f"send to {self.label} failed: {exc}") from exc

    def run(self):
        """Handle the connection until it ends, then clean up exactly once."""
        try:
            self._identify()
            while self.state is SessionState.IDENTIFIED:
                self._relay_next()
        except PeerClosed:
            pass
        except HandshakeError as exc:
            log.warning("Rejected handshake from %s: %s", self.address, exc)
        except DecodeError as exc:
            log.warning("Dropping %s: %s", self.label, exc)
        except SendFailure as exc:
            log.warning("Dropping %s: %s", self.label, exc)
        except Exception:
            log.exception("Unexpected error in session for %s", self.label)
        finally:
            self.close()

    def _identify(self):
        payload = read_frame(self.sock, self.max_frame_size)
        self.display_name = parse_handshake(payload, self.max_name_length)
        self.state = SessionState.IDENTIFIED
        log.info("[+] %s joined from %s", self.display_name, self.address)
        self.registry.broadcast_except(self.id, format_joined(self.display_name))

    def _relay_next(self):
        payload = read_frame(self.sock, self.max_frame_size)
        message = format_chat(self.display_name, payload)
        if len(message) > self.max_frame_size:
            log.warning("Dropping oversized message from %s (%d bytes)",
                        self.display_name, len(message))
            return
        log.debug("Message from %s: %r", self.display_name, payload)
        self.registry.broadcast_except(self.id, message)

    def close(self):
        """Unregister, announce the departure and close the socket.

        Safe to call from several paths; only the first call does anything.
        """
        with self._close_lock:
            if self.state is SessionState.CLOSED:
                return
            was_identified = self.state is SessionState.IDENTIFIED
            self.state = SessionState.CLOSED

        self.registry.unregister(self.id)
        if was_identified:
            log.info("[-] %s disconnected", self.display_name)
            self.registry.broadcast_except(self.id, format_left(self.display_name))
        try:
            self.sock.close()
        except OSError:
            pass

    def disconnect(self):
        """Shut the socket down so a blocked read in run() returns and cleans up."""
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
