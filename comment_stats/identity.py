"""Resolves which user a statistics request is about.

A ``user`` query parameter that names a known user wins. Otherwise the
session user is used, and without a session the anonymous user.

The two steps are separate: ``find_requested_user`` reads the
repository and may block, while ``resolve_uid`` only touches the
session store and must run on the event loop, the same thread as
the periodic session cleanup.
"""

import logging

from comment_stats.repository import ANONYMOUS_UID, CommentRepository
from comment_stats.session_store import SessionStore

logger = logging.getLogger(__name__)


def parse_uid(value: str | None) -> int | None:
    """Parse a UID from a query-string value, or return None if it isn't one."""
    if value is None:
        return None
    value = value.strip()
    if not value.isdecimal():
        return None
    return int(value)


def find_requested_user(user_param: str | None, repository: CommentRepository) -> int | None:
    """Return the UID named by the ``user`` query parameter, if it exists.

    Args:
        user_param: Raw value of the ``user`` query parameter, if any.
        repository: Used to check that ``user_param`` names a real user.

    Returns:
        The UID when ``user_param`` parses and names a known user,
        otherwise None.

    Raises:
        RepositoryUnavailableError: If the user lookup fails.
    """
    uid = parse_uid(user_param)
    if uid is not None and repository.find_user(uid) is not None:
        return uid
    if user_param is not None:
        logger.info("Ignoring unresolvable user parameter %r", user_param)
    return None


def resolve_uid(requested_uid: int | None, session_id: str | None, sessions: SessionStore) -> int:
    """Determine the UID to compute statistics for.

    Args:
        requested_uid: Result of ``find_requested_user()``.
        session_id: Session ID from the request, if any.
        sessions: Store used to look up the session user.

    Returns:
        ``requested_uid`` when set, else the session's UID, else the
        anonymous UID.

    Raises:
        SessionNotFoundError: If ``requested_uid`` is None and the session
            ID is unknown or expired.
    """
    if requested_uid is not None:
        return requested_uid
    if session_id:
        return sessions.get_uid(session_id)
    return ANONYMOUS_UID
