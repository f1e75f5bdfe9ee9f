"""Registry of live chat sessions.

Tracks every connected session and fans messages out to all of them except
the sender. Membership changes and broadcast snapshots share one lock; the
actual socket writes happen outside it so a slow peer can't block joins and
leaves for everyone else.
"""

import logging
import threading

from relaychat.core.errors import SendFailure

log = logging.getLogger(__name__)


class Registry:
    """Thread-safe set of sessions keyed by session id.

    A session only needs an ``id`` attribute and a ``send(payload)`` method
    that raises SendFailure when the write fails.
    """

    def __init__(self):
        self._sessions = {}
        self._lock = threading.Lock()

    def register(self, session):
        """Add a session and return the handle used to remove it later.

        Raises:
            ValueError: if a session with the same id is already registered
        """
        with self._lock:
            if session.id in self._sessions:
                raise ValueError(f"Session {session.id} is already registered")
            self._sessions[session.id] = session
        return session.id

    def unregister(self, handle):
        """Remove a session. Removing an unknown or already removed handle is a no-op.

        Returns:
            The removed session, or None if it was not registered
        """
        with self._lock:
            return self._sessions.pop(handle, None)

    def broadcast_except(self, sender_handle, payload):
        """Send payload to every registered session other than sender_handle.

        A failed send is logged and skipped. The failed session stays
        registered; its own handler notices the broken connection and
        removes itself.

        There is no send timeout: a peer that stays connected but stops
        reading fills its socket buffer, and sendall then blocks while
        holding that session's write lock. Every broadcaster reaching that
        session waits behind it.

        Returns:
            Number of sessions the payload was delivered to
        """
        with self._lock:
            recipients = [s for h, s in self._sessions.items() if h != sender_handle]

        delivered = 0
        for session in recipients:
            try:
                session.send(payload)
            except SendFailure as exc:
                log.warning("Broadcast to session %s failed: %s", session.id, exc)
                continue
            delivered += 1
        return delivered

    def sessions(self):
        """Return a snapshot list of the registered sessions."""
        with self._lock:
            return list(self._sessions.values())

    def names(self):
        """Return display names of identified sessions."""
        return [s.display_name for s in self.sessions() if getattr(s, "display_name", None)]

    def __contains__(self, handle):
        with self._lock:
            return handle in self._sessions

    def __len__(self):
        with self._lock:
            return len(self._sessions)
