from .console import Console
from .session import ChatClient, run_session

__all__ = ["Console", "ChatClient", "run_session"]
