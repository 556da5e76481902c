"""
Active Session Bookkeeping

Tracks which client connections are currently open. The registry is
mutated only under its own lock and is used for enumeration and
statistics; it does not coordinate shutdown.
"""

import itertools
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Session:
    """
    Server-side state for one client connection.

    Attributes:
        id: Process-unique session number
        peer: Remote address as reported by the transport
        connected_at: Accept time (seconds since the epoch)
        alive: False once the connection handler has exited
    """
    id: int
    peer: Any = None
    connected_at: float = field(default_factory=time.time)
    alive: bool = True


class SessionRegistry:
    """Process-wide set of active sessions, keyed by session id."""

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: Dict[int, Session] = {}
        self._ids = itertools.count(1)

    def register(self, peer: Any = None) -> Session:
        """Create a session for a newly accepted connection and track it."""
        with self._lock:
            session = Session(id=next(self._ids), peer=peer)
            self._sessions[session.id] = session
        return session

    def unregister(self, session: Session) -> None:
        """Mark a session dead and stop tracking it. Safe to call twice."""
        with self._lock:
            session.alive = False
            self._sessions.pop(session.id, None)

    def get(self, session_id: int) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(session_id)

    def active(self) -> List[Session]:
        """Snapshot of the sessions currently open, oldest first."""
        with self._lock:
            return sorted(self._sessions.values(), key=lambda s: s.id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
