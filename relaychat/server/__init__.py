from .server import ChatServer, accept_loop
from .session import Session, SessionState

__all__ = ["ChatServer", "accept_loop", "Session", "SessionState"]
