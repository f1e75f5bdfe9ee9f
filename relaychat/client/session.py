"""Client side of a chat connection.

A ChatClient runs two threads over one connected socket: the sender reads
lines from the console and sends them as frames, the receiver prints every
frame the server relays. The receiver decides when the session is over.
"""

import logging
import socket
import threading

from relaychat.client.console import Console
from relaychat.config import MAX_FRAME_SIZE, MAX_NAME_LENGTH
from relaychat.core.errors import DecodeError, FrameTooLarge, PeerClosed
from relaychat.core.protocol import encode_handshake, read_frame, write_frame

log = logging.getLogger(__name__)

NAME_PROMPT = "Enter your chat name: "
MESSAGE_PROMPT = "Send your message: "
QUIT_COMMANDS = ("quit", "exit")


class ChatClient:
    """Duplex chat session over a connected socket."""

    def __init__(self, sock, console=None, max_frame_size=MAX_FRAME_SIZE,
                 max_name_length=MAX_NAME_LENGTH):
        self.sock = sock
        self.console = console if console is not None else Console()
        self.max_frame_size = max_frame_size
        self.max_name_length = max_name_length
        self.name = None
        self.finished = threading.Event()
        self.sender = None
        self.receiver = None
        self._send_lock = threading.Lock()

    def send(self, payload):
        with self._send_lock:
            write_frame(self.sock, payload, self.max_frame_size)

    def ask_name(self):
        """Prompt until the user enters a usable display name."""
        while True:
            name = self.console.read_line(NAME_PROMPT).strip()
            if not name:
                continue
            if len(name) > self.max_name_length:
                self.console.write_line(
                    f"Chat name must be at most {self.max_name_length} characters.")
                continue
            return name

    def send_loop(self):
        """Sender path: handshake, then one frame per line of input until quit."""
        try:
            self.name = self.ask_name()
            self.send(encode_handshake(self.name))

            while not self.finished.is_set():
                message = self.console.read_line(MESSAGE_PROMPT)
                if not message:
                    continue
                if message.strip() in QUIT_COMMANDS:
                    self.console.write_line("\nStopping the application.")
                    break
                try:
                    self.send(message.encode("utf-8"))
                except FrameTooLarge:
                    self.console.write_line("\nMessage too long, not sent.")
        except EOFError:
            log.debug("Input closed, leaving chat")
        except OSError as exc:
            log.debug("Send failed: %s", exc)
            self.console.write_line("\nError sending message.")
        finally:
            self._close_write()

    def receive_loop(self):
        """Receiver path: print frames until the server goes away."""
        try:
            while True:
                payload = read_frame(self.sock, self.max_frame_size)
                self.console.show_incoming(payload.decode("utf-8", errors="replace"))
        except (PeerClosed, DecodeError) as exc:
            log.debug("Receive loop ended: %s", exc)
            self.console.write_line("\nDisconnected from server.")
        finally:
            try:
                self.sock.close()
            except OSError:
                pass
            self.finished.set()

    def _close_write(self):
        try:
            self.sock.shutdown(socket.SHUT_WR)
        except OSError:
            pass

    def start(self):
        self.sender = threading.Thread(target=self.send_loop, name="chat-sender", daemon=True)
        self.receiver = threading.Thread(target=self.receive_loop, name="chat-receiver", daemon=True)
        self.sender.start()
        self.receiver.start()

    def run(self):
        """Run both paths and return once the connection is gone.

        The sender may still be blocked on console input at that point; it is
        a daemon thread and ends with the process.
        """
        self.start()
        self.receiver.join()


def run_session(connected_socket, console=None):
    """Run an interactive chat session over an already connected socket."""
    client = ChatClient(connected_socket, console)
    client.run()
    return client
