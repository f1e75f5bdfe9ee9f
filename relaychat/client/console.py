"""Console input/output shared by the client's sender and receiver threads.

Every logical unit of output (a prompt, an incoming message plus the prompt
redrawn under it) is written while holding the console lock, so the two
threads never tear each other's lines apart.
"""

import sys
import threading
from contextlib import contextmanager


class Console:
    """Line-oriented console over a pair of text streams."""

    def __init__(self, stdin=None, stdout=None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.prompt = ""
        self._lock = threading.Lock()

    @contextmanager
    def locked(self):
        with self._lock:
            yield self

    def _write(self, text):
        self.stdout.write(text)
        self.stdout.flush()

    def write_line(self, text):
        with self.locked():
            self._write(text + "\n")

    def read_line(self, prompt=""):
        """Show prompt and read one line of input without its line ending.

        Raises:
            EOFError: when the input stream is exhausted
        """
        with self.locked():
            self.prompt = prompt
            self._write(prompt)
        line = self.stdin.readline()
        if not line:
            raise EOFError("end of input")
        return line.rstrip("\r\n")

    def show_incoming(self, text):
        """Print an incoming message on its own line and redraw the current prompt."""
        with self.locked():
            self._write("\n" + text + "\n" + self.prompt)
