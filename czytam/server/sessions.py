"""In-memory practice-session store with idle-TTL cleanup.

WHY: The HTTP API lets a client (a tablet app, a kiosk, curl) run a
practice session across many requests: one request per tap or key. The
session object (cursor, page, memory board) has to live between those
requests. An in-memory store is enough for a single classroom device;
nothing about a practice session needs to survive a restart.

HOW: PracticeSession wraps the mode's session object with an id and
timestamps. SessionStore is a dict guarded by a threading.Lock with
create/get/list/delete and an idle-expiry sweep run by the app's
lifespan task.

RULES:
- All store mutations are protected by threading.Lock
- Session ids are UUID4 hex strings generated at creation time
- get_session() bumps last_used_at; a session expires after ttl_seconds idle
- create_session() raises ValueError once max_sessions are live
- Defaults come from CZYTAM_SESSION_TTL_S and CZYTAM_MAX_SESSIONS
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from czytam.api.models import LearningMode
from czytam.config import CZYTAM_MAX_SESSIONS, CZYTAM_SESSION_TTL_S

logger = logging.getLogger(__name__)


@dataclass
class PracticeSession:
    """One live practice session.

    RULES:
    - id: UUID4 hex, immutable after creation
    - mode: the LearningMode the session was created for
    - state: CardShowSession, BookletSession, SyllablesInMotionSession
      or MemoryGame, depending on mode
    - created_at / last_used_at: epoch seconds
    """

    id: str
    mode: LearningMode
    state: Any
    created_at: float
    last_used_at: float


class SessionStore:
    """Thread-safe in-memory store for practice sessions."""

    def __init__(
        self,
        ttl_seconds: float = CZYTAM_SESSION_TTL_S,
        max_sessions: int = CZYTAM_MAX_SESSIONS,
    ) -> None:
        self._sessions: Dict[str, PracticeSession] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions

    def create_session(self, mode: LearningMode, state: Any) -> PracticeSession:
        with self._lock:
            if len(self._sessions) >= self.max_sessions:
                raise ValueError(
                    "Maximum number of concurrent sessions ({}) reached".format(
                        self.max_sessions
                    )
                )

            now = time.time()
            session = PracticeSession(
                id=uuid.uuid4().hex,
                mode=mode,
                state=state,
                created_at=now,
                last_used_at=now,
            )
            self._sessions[session.id] = session

        logger.info("Created %s session %s", mode.value, session.id)
        return session

    def get_session(self, session_id: str) -> Optional[PracticeSession]:
        """Return the live session, or None; marks it as used."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                session.last_used_at = time.time()
            return session

    def list_sessions(self) -> List[PracticeSession]:
        """Snapshot of all sessions, oldest first."""
        with self._lock:
            return sorted(self._sessions.values(), key=lambda s: s.created_at)

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)

        if session is None:
            return False

        logger.info("Deleted session %s", session_id)
        return True

    def cleanup_expired(self) -> int:
        """Remove sessions idle for longer than the TTL.

        RULES:
        - Idle time is measured from last_used_at, not created_at
        - Returns the count of removed sessions
        """
        now = time.time()
        expired: List[PracticeSession] = []

        with self._lock:
            for session_id, session in list(self._sessions.items()):
                if now - session.last_used_at > self._ttl_seconds:
                    expired.append(self._sessions.pop(session_id))

        for session in expired:
            logger.info(
                "Expired session %s (idle %.0fs)", session.id, now - session.last_used_at
            )

        return len(expired)
