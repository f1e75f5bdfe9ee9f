"""Entry point for the relaychat console client."""

import argparse
import socket
import sys

from relaychat.client.console import Console
from relaychat.client.session import run_session
from relaychat.config import CLIENT_HOST, PREFERRED_PORT, configure_logging


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Connect to a relaychat server.")
    p.add_argument("--host", default=CLIENT_HOST)
    p.add_argument("--port", type=int, default=PREFERRED_PORT)
    p.add_argument("--log-level", default="WARNING")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_level)
    console = Console()
    console.write_line("Client started")

    try:
        sock = socket.create_connection((args.host, args.port))
    except OSError as exc:
        console.write_line(f"Unable to connect to server: {exc}")
        return 1

    console.write_line("Successfully connected to server")
    try:
        run_session(sock, console)
    except KeyboardInterrupt:
        sock.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
