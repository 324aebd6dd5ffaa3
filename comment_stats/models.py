"""Pydantic models for the comment statistics service.

Covers the read-only records served by the comment repository
(users, comments, content items), the derived statistics summary,
and the request/response bodies of the HTTP API.
"""

from datetime import datetime

from pydantic import BaseModel, Field

# Maximum number of entries in a summary's recent-comments list.
RECENT_COMMENTS_MAX = 5


class User(BaseModel):
    """A site user as known to the comment repository."""

    uid: int = Field(ge=0, description="User identifier (0 is the anonymous user)")
    name: str = Field(description="Display name")


class ContentItem(BaseModel):
    """A content item that comments can be posted on."""

    content_id: int = Field(description="Content item identifier")
    title: str = Field(description="Title of the content item")


class Comment(BaseModel):
    """A single posted comment.

    ``published`` reflects moderation state. Statistics count every
    comment regardless of it.
    """

    cid: int = Field(description="Comment identifier")
    author_uid: int = Field(ge=0, description="UID of the comment author")
    created: datetime = Field(description="When the comment was posted")
    subject: str = Field(default="", description="Short comment subject")
    body: str | None = Field(default=None, description="Comment body, may contain markup")
    target_content_id: int = Field(description="ID of the content item the comment was posted on")
    published: bool = Field(default=True, description="Whether the comment passed moderation")


class RecentComment(BaseModel):
    """A recent comment paired with the title of its content item."""

    subject: str = Field(description="Subject of the comment")
    content_title: str = Field(description="Title of the commented content item")


class StatsSummary(BaseModel):
    """Comment activity of one user, computed fresh per request.

    ``recent_comments`` is ordered most recent first.
    """

    total_comments: int = Field(ge=0, description="Number of comments authored by the user")
    total_words: int = Field(ge=0, description="Words across all comment bodies, markup stripped")
    recent_comments: list[RecentComment] = Field(
        default_factory=list,
        max_length=RECENT_COMMENTS_MAX,
        description="Most recent comments whose content item still exists",
    )


class LoginRequest(BaseModel):
    """Request body for the /api/login endpoint."""

    uid: int = Field(ge=0, description="UID of the user to open a session for")


class LoginResponse(BaseModel):
    """Response body returned by /api/login.

    The session_id is passed back in the ``X-Session-Id`` header of
    later requests to act as this user.
    """

    session_id: str = Field(description="Session ID for subsequent requests")
    uid: int = Field(description="UID bound to the session")


class UserCommentsResponse(BaseModel):
    """Response body returned by /api/user-comments.

    Carries the structured summary plus the render-ready list of
    plain strings produced from it.
    """

    uid: int = Field(description="UID the statistics were computed for")
    summary: StatsSummary = Field(description="Structured comment statistics")
    items: list[str] = Field(description="Render-ready lines, in display order")
