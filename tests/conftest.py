import itertools
import socket
import threading
import time

import pytest

from relaychat.core.errors import SendFailure
from relaychat.core.protocol import encode_handshake, write_frame
from relaychat.core.registry import Registry
from relaychat.server.server import ChatServer

TIMEOUT = 5.0

_fake_ids = itertools.count(10_000)


class FakeSession:
    """Stand-in for a server Session that records what it was sent."""

    def __init__(self, name=None, broken=False):
        self.id = next(_fake_ids)
        self.display_name = name
        self.broken = broken
        self.received = []
        self._cond = threading.Condition()

    def send(self, payload):
        if self.broken:
            raise SendFailure("broken pipe")
        with self._cond:
            self.received.append(payload)
            self._cond.notify_all()

    def disconnect(self):
        pass

    def wait_for(self, count, timeout=TIMEOUT):
        with self._cond:
            return self._cond.wait_for(lambda: len(self.received) >= count, timeout)


def wait_until(predicate, timeout=TIMEOUT, interval=0.01):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def registry():
    return Registry()


@pytest.fixture
def make_fake():
    return FakeSession


@pytest.fixture
def sock_pair():
    a, b = socket.socketpair()
    b.settimeout(TIMEOUT)
    yield a, b
    a.close()
    b.close()


@pytest.fixture
def running_server():
    server = ChatServer()
    server.bind("127.0.0.1", 0)
    thread = threading.Thread(target=server.accept_loop, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    thread.join(TIMEOUT)


@pytest.fixture
def connect(running_server):
    opened = []

    def _connect(name=None):
        sock = socket.create_connection(running_server.address[:2], timeout=TIMEOUT)
        opened.append(sock)
        if name is not None:
            write_frame(sock, encode_handshake(name))
            assert wait_until(lambda: name in running_server.registry.names())
        return sock

    yield _connect
    for sock in opened:
        sock.close()


@pytest.fixture
def eventually():
    return wait_until
