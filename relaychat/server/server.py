"""Chat server: accept loop and handler supervision.

Every accepted connection becomes a Session registered with the shared
Registry and handled on its own thread. Handler threads are tracked so the
server can wait for them on shutdown.
"""

import logging
import socket
import threading
import time

from relaychat.config import MAX_FRAME_SIZE, MAX_NAME_LENGTH
from relaychat.core.errors import TransportError
from relaychat.core.registry import Registry
from relaychat.server.session import Session

log = logging.getLogger(__name__)

ACCEPT_RETRY_DELAY = 0.1


class ChatServer:
    """Accepts clients and relays their messages through a Registry."""

    def __init__(self, registry=None, max_frame_size=MAX_FRAME_SIZE,
                 max_name_length=MAX_NAME_LENGTH):
        self.registry = registry if registry is not None else Registry()
        self.max_frame_size = max_frame_size
        self.max_name_length = max_name_length
        self.listening_socket = None
        self._handlers = set()
        self._handlers_lock = threading.Lock()
        self._stopped = threading.Event()
        self._accept_lock = threading.Lock()

    def bind(self, host, port, backlog=socket.SOMAXCONN):
        """Create the listening socket.

        Raises:
            TransportError: if the address can't be bound
        """
        server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            server_socket.bind((host, port))
            server_socket.listen(backlog)
        except OSError as exc:
            server_socket.close()
            raise TransportError(f"Could not listen on {host}:{port}: {exc}") from exc
        self.listening_socket = server_socket
        return server_socket

    @property
    def address(self):
        if self.listening_socket is None:
            return None
        return self.listening_socket.getsockname()

    def accept_loop(self, listening_socket=None):
        """Accept connections until shutdown() is called.

        A failed accept is logged and the loop keeps going.
        """
        if listening_socket is not None:
            self.listening_socket = listening_socket
        server_socket = self.listening_socket
        if server_socket is None:
            raise TransportError("accept_loop needs a listening socket")

        while not self._stopped.is_set():
            try:
                client_socket, address = server_socket.accept()
            except OSError as exc:
                if self._stopped.is_set() or server_socket.fileno() < 0:
                    break
                log.error("Accept failed: %s", exc)
                time.sleep(ACCEPT_RETRY_DELAY)
                continue
            with self._accept_lock:
                if self._stopped.is_set():
                    client_socket.close()
                    break
                self.start_session(client_socket, address)

    def start_session(self, client_socket, address):
        """Register a new connection and start its handler thread."""
        session = Session(
            client_socket,
            address,
            self.registry,
            max_frame_size=self.max_frame_size,
            max_name_length=self.max_name_length,
        )
        self.registry.register(session)
        log.info("New client connected from %s (session %s)", address, session.id)

        thread = threading.Thread(
            target=self._supervise,
            args=(session,),
            name=f"session-{session.id}",
            daemon=True,
        )
        with self._handlers_lock:
            self._handlers.add(thread)
        thread.start()
        return session

    def _supervise(self, session):
        try:
            session.run()
        finally:
            with self._handlers_lock:
                self._handlers.discard(threading.current_thread())

    def serve_forever(self, host, port):
        """Bind host:port and run the accept loop on the calling thread."""
        self.bind(host, port)
        log.info("Server listening on %s:%s", *self.address[:2])
        self.accept_loop()

    def shutdown(self, timeout=5.0):
        """Stop accepting, disconnect every session and wait for handlers."""
        with self._accept_lock:
            self._stopped.set()
        if self.listening_socket is not None:
            try:
                self.listening_socket.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            self.listening_socket.close()

        for session in self.registry.sessions():
            session.disconnect()

        with self._handlers_lock:
            handlers = list(self._handlers)
        for thread in handlers:
            thread.join(timeout)


def accept_loop(listening_socket, registry=None):
    """Run a ChatServer accept loop on an already bound, listening socket."""
    server = ChatServer(registry)
    server.accept_loop(listening_socket)
    return server
