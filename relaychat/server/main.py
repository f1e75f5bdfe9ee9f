"""Entry point for the relaychat server."""

import argparse
import logging
import sys

from relaychat.config import (
    LOG_LEVEL,
    PREFERRED_PORT,
    SERVER_HOST,
    SERVER_PORT_AUTO_FALLBACK,
    configure_logging,
    find_available_port,
)
from relaychat.core.errors import TransportError
from relaychat.server.server import ChatServer

log = logging.getLogger(__name__)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Run the relaychat server.")
    p.add_argument("--host", default=SERVER_HOST)
    p.add_argument("--port", type=int, default=PREFERRED_PORT)
    p.add_argument("--log-level", default=LOG_LEVEL)
    p.add_argument(
        "--auto-port",
        action="store_true",
        default=SERVER_PORT_AUTO_FALLBACK,
        help="Try the following ports when the preferred one is taken",
    )
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_level)
    log.info("Starting TCP Chat Server...")

    port = find_available_port(args.port, host=args.host, allow_fallback=args.auto_port)
    if port is None:
        log.error("Could not find an available port starting from %s", args.port)
        return 1

    server = ChatServer()
    try:
        server.serve_forever(args.host, port)
    except TransportError as exc:
        log.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        log.info("Shutting down")
    finally:
        server.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
