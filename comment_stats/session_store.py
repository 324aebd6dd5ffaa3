"""In-memory session store binding session IDs to user IDs.

Maps UUID session IDs to the UID of the user who opened the session,
so requests can carry an ``X-Session-Id`` header instead of naming
a user explicitly.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from comment_stats.config import get_settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------


class SessionStoreError(Exception):
    """Base exception for session-store-related errors."""


class SessionNotFoundError(SessionStoreError):
    """Raised when a session ID is not found or has expired.

    Log in again to obtain a new session.
    """


# ---------------------------------------------------------------------------
# Internal data structures
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class _SessionEntry:
    """Internal record pairing a user ID with session timestamps.

    Attributes:
        uid: User the session acts as.
        created_at: UTC timestamp when the session was created.
        last_used: UTC timestamp of the most recent access.
    """

    uid: int
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_used: datetime = field(default_factory=lambda: datetime.now(UTC))


# ---------------------------------------------------------------------------
# SessionStore
# ---------------------------------------------------------------------------


class SessionStore:
    """In-memory store of user sessions with a fixed time-to-live.

    Each login creates a new entry keyed by a UUID4 string. Entries
    older than ``ttl`` are rejected on access and purged by
    ``cleanup_expired()``.
    """

    def __init__(self, ttl: timedelta | None = None) -> None:
        self._sessions: dict[str, _SessionEntry] = {}
        self.ttl = ttl if ttl is not None else timedelta(minutes=get_settings().session_ttl_minutes)

    def _is_expired(self, entry: _SessionEntry, now: datetime) -> bool:
        return now - entry.created_at > self.ttl

    def login(self, uid: int) -> str:
        """Open a session for ``uid`` and return its ID.

        The caller is responsible for checking that the user exists.
        """
        session_id = str(uuid.uuid4())
        self._sessions[session_id] = _SessionEntry(uid=uid)
        logger.info("Session opened for uid=%s, session_id=%s", uid, session_id)
        return session_id

    def get_uid(self, session_id: str) -> int:
        """Return the UID bound to a live session.

        Updates ``last_used`` on success.

        Args:
            session_id: UUID4 string returned by ``login()``.

        Returns:
            The UID associated with the session.

        Raises:
            SessionNotFoundError: If the session does not exist or has expired.
        """
        entry = self._sessions.get(session_id)
        if entry is None:
            raise SessionNotFoundError("Session not found or has expired. Please log in again.")

        now = datetime.now(UTC)
        if self._is_expired(entry, now):
            self._sessions.pop(session_id, None)
            logger.info("Session %s expired, removing", session_id)
            raise SessionNotFoundError("Session has expired. Please log in again.")

        entry.last_used = now
        return entry.uid

    def remove(self, session_id: str) -> None:
        """Remove a session, effectively logging the user out.

        Silently ignores unknown session IDs so that logout is idempotent.
        """
        removed = self._sessions.pop(session_id, None)
        if removed is not None:
            logger.info("Session %s removed (logout)", session_id)
        else:
            logger.debug("Attempted to remove unknown session %s", session_id)

    def cleanup_expired(self) -> None:
        """Remove all sessions that have exceeded the TTL."""
        now = datetime.now(UTC)
        expired_ids = [sid for sid, entry in self._sessions.items() if self._is_expired(entry, now)]

        for sid in expired_ids:
            self._sessions.pop(sid, None)

        if expired_ids:
            logger.info("Cleaned up %d expired session(s): %s", len(expired_ids), expired_ids)


# Module-level singleton used across the application.
session_store = SessionStore()
