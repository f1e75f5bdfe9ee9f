import io
import socket
import threading
import time

import pytest

from relaychat.client.console import Console
from relaychat.client.session import MESSAGE_PROMPT, NAME_PROMPT, ChatClient, run_session
from relaychat.core.errors import PeerClosed
from relaychat.core.protocol import read_frame, write_frame

TIMEOUT = 5.0


def make_client(sock, text, **kwargs):
    out = io.StringIO()
    console = Console(stdin=io.StringIO(text), stdout=out)
    return ChatClient(sock, console, **kwargs), out


def test_sender_handshakes_then_sends_raw_text(sock_pair):
    client_side, server_side = sock_pair
    client, out = make_client(client_side, "Alice\nhello there\nquit\n")

    client.send_loop()

    assert read_frame(server_side) == b"__CONNECT__Alice"
    assert read_frame(server_side) == b"hello there"
    with pytest.raises(PeerClosed):
        read_frame(server_side)
    assert "Stopping the application." in out.getvalue()


def test_name_is_prompted_until_not_blank(sock_pair):
    client_side, server_side = sock_pair
    client, out = make_client(client_side, "\n   \n  Alice \n")

    client.send_loop()

    assert out.getvalue().count(NAME_PROMPT) == 3
    assert client.name == "Alice"
    assert read_frame(server_side) == b"__CONNECT__Alice"


def test_overlong_name_is_prompted_again(sock_pair):
    client_side, server_side = sock_pair
    client, out = make_client(client_side, "a-very-long-name\nAl\n", max_name_length=4)

    client.send_loop()

    assert "at most 4 characters" in out.getvalue()
    assert read_frame(server_side) == b"__CONNECT__Al"


def test_empty_lines_and_quit_keyword_are_not_sent(sock_pair):
    client_side, server_side = sock_pair
    client, _ = make_client(client_side, "Alice\n\nexit\nnever sent\n")

    client.send_loop()

    assert read_frame(server_side) == b"__CONNECT__Alice"
    with pytest.raises(PeerClosed):
        read_frame(server_side)


def test_end_of_input_closes_write_side(sock_pair):
    client_side, server_side = sock_pair
    client, _ = make_client(client_side, "Alice\nhi\n")

    client.send_loop()

    assert read_frame(server_side) == b"__CONNECT__Alice"
    assert read_frame(server_side) == b"hi"
    with pytest.raises(PeerClosed):
        read_frame(server_side)


def test_receiver_renders_frames_and_stops_on_close(sock_pair):
    client_side, server_side = sock_pair
    client, out = make_client(client_side, "")
    client.console.prompt = MESSAGE_PROMPT

    write_frame(server_side, b"Bob : hi")
    write_frame(server_side, b"Bob disconnected.")
    server_side.shutdown(socket.SHUT_WR)

    client.receive_loop()

    text = out.getvalue()
    assert "\nBob : hi\n" + MESSAGE_PROMPT in text
    assert "\nBob disconnected.\n" in text
    assert text.endswith("Disconnected from server.\n")
    assert client.finished.is_set()
    assert client_side.fileno() == -1


def test_run_session_returns_when_server_closes(sock_pair):
    client_side, server_side = sock_pair
    out = io.StringIO()
    console = Console(stdin=io.StringIO("Alice\n"), stdout=out)

    def server():
        try:
            assert read_frame(server_side) == b"__CONNECT__Alice"
            write_frame(server_side, b"Bob : welcome")
            with pytest.raises(PeerClosed):
                read_frame(server_side)
        finally:
            server_side.close()

    t = threading.Thread(target=server, daemon=True)
    t.start()
    client = run_session(client_side, console)
    t.join(TIMEOUT)

    assert client.finished.is_set()
    assert "Bob : welcome" in out.getvalue()
    assert "Disconnected from server." in out.getvalue()


class SlowStream:
    """Text stream that yields the GIL between characters."""

    def __init__(self):
        self.parts = []

    def write(self, text):
        for ch in text:
            self.parts.append(ch)
            time.sleep(0)

    def flush(self):
        pass

    def getvalue(self):
        return "".join(self.parts)


def test_console_output_units_are_not_interleaved():
    stream = SlowStream()
    console = Console(stdin=io.StringIO(""), stdout=stream)
    console.prompt = "> "

    def writer(tag):
        for i in range(50):
            console.show_incoming(f"{tag}{i}")

    threads = [threading.Thread(target=writer, args=(tag,)) for tag in "AB"]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    units = stream.getvalue().split("> ")
    assert units[-1] == ""
    bodies = sorted(u.strip("\n") for u in units[:-1])
    assert bodies == sorted([f"A{i}" for i in range(50)] + [f"B{i}" for i in range(50)])
    assert all(u.startswith("\n") and u.endswith("\n") and u.count("\n") == 2 for u in units[:-1])


def test_read_line_raises_eof_when_input_ends():
    console = Console(stdin=io.StringIO(""), stdout=io.StringIO())
    with pytest.raises(EOFError):
        console.read_line("prompt: ")
