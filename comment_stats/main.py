"""FastAPI application for the Comment Stats service.

Exposes endpoints for opening and closing user sessions and for
reading a user's comment statistics, both as a structured summary
and as render-ready display lines.
"""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from pathlib import Path

from fastapi import FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from comment_stats.aggregator import CommentStatsAggregator
from comment_stats.config import get_settings
from comment_stats.identity import find_requested_user, resolve_uid
from comment_stats.models import LoginRequest, LoginResponse, StatsSummary, UserCommentsResponse
from comment_stats.rendering import render_summary
from comment_stats.repository import RepositoryUnavailableError, comment_repository
from comment_stats.session_store import SessionNotFoundError, session_store

logger = logging.getLogger(__name__)

settings = get_settings()

# Interval between expired-session cleanup sweeps.
_CLEANUP_INTERVAL_SECONDS = settings.session_cleanup_interval_seconds

aggregator = CommentStatsAggregator(comment_repository, recent_limit=settings.recent_comments_limit)


async def _periodic_session_cleanup() -> None:
    """Run session_store.cleanup_expired() every _CLEANUP_INTERVAL_SECONDS."""
    while True:
        await asyncio.sleep(_CLEANUP_INTERVAL_SECONDS)
        session_store.cleanup_expired()


def _load_seed_file(path: str) -> None:
    """Populate the comment repository from a JSON seed document."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    comment_repository.load_seed(data)
    logger.info("Seeded comment repository from %s", path)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-wide startup and shutdown resources.

    Loads the configured seed file, then starts a background task that
    periodically purges expired sessions. The task is cancelled when
    the application shuts down.
    """
    if settings.seed_file:
        await asyncio.to_thread(_load_seed_file, settings.seed_file)

    cleanup_task = asyncio.create_task(_periodic_session_cleanup())
    logger.info("Started periodic session cleanup task (interval=%ds)", _CLEANUP_INTERVAL_SECONDS)
    try:
        yield
    finally:
        cleanup_task.cancel()
        with suppress(asyncio.CancelledError):
            await cleanup_task
        logger.info("Stopped periodic session cleanup task")


app = FastAPI(
    title=settings.app_name,
    description="Per-user comment statistics API",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _unavailable(exc: RepositoryUnavailableError) -> HTTPException:
    logger.exception("Comment repository unavailable")
    return HTTPException(status_code=503, detail=str(exc))


# ---------------------------------------------------------------------------
# Session endpoints
# ---------------------------------------------------------------------------


@app.post("/api/login", response_model=LoginResponse)  # type: ignore[untyped-decorator]
async def api_login(request: LoginRequest) -> LoginResponse:
    """Open a session acting as the given user.

    Raises:
        HTTPException 404: If no user with that UID exists.
        HTTPException 503: If the comment repository is unavailable.
    """
    logger.info("Login request for uid=%s", request.uid)

    try:
        user = await asyncio.to_thread(comment_repository.find_user, request.uid)
    except RepositoryUnavailableError as exc:
        raise _unavailable(exc) from exc

    if user is None:
        raise HTTPException(status_code=404, detail=f"User {request.uid} not found.")

    session_id = session_store.login(user.uid)
    return LoginResponse(session_id=session_id, uid=user.uid)


@app.post("/api/logout")  # type: ignore[untyped-decorator]
async def api_logout(session_id: str) -> dict[str, str]:
    """Log out by removing the session associated with the given ID.

    Idempotent: unknown or already-removed session IDs still succeed.
    """
    logger.info("Logout request for session %s", session_id)
    session_store.remove(session_id)
    return {"detail": "Logged out successfully"}


# ---------------------------------------------------------------------------
# Comment statistics
# ---------------------------------------------------------------------------


@app.get("/api/user-comments", response_model=UserCommentsResponse)  # type: ignore[untyped-decorator]
async def api_user_comments(
    user: str | None = None,
    x_session_id: str | None = Header(default=None),
) -> UserCommentsResponse:
    """Return comment statistics for the requested or session user.

    The ``user`` query parameter overrides the session user when it
    names an existing user. Without either, the anonymous user is used.

    Raises:
        HTTPException 401: If the session is unknown or expired.
        HTTPException 503: If the comment repository is unavailable.
    """
    logger.info("Received user-comments request (user=%r, session=%s)", user, x_session_id)

    try:
        requested_uid = await asyncio.to_thread(find_requested_user, user, comment_repository)
        # Session lookups stay on the loop; cleanup_expired iterates the same dict there.
        uid = resolve_uid(requested_uid, x_session_id, session_store)
        summary = await asyncio.to_thread(aggregator.compute_summary, uid)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except RepositoryUnavailableError as exc:
        raise _unavailable(exc) from exc

    return UserCommentsResponse(uid=uid, summary=summary, items=render_summary(summary))


@app.get("/api/users/{uid}/comment-stats", response_model=StatsSummary)  # type: ignore[untyped-decorator]
async def api_comment_stats(uid: int) -> StatsSummary:
    """Return the structured comment statistics for ``uid``.

    A UID without comments yields an all-zero summary, not 404.

    Raises:
        HTTPException 503: If the comment repository is unavailable.
    """
    logger.info("Received comment-stats request for uid=%s", uid)

    try:
        return await asyncio.to_thread(aggregator.compute_summary, uid)
    except RepositoryUnavailableError as exc:
        raise _unavailable(exc) from exc
