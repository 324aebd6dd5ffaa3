"""Read access to comments, content items and users.

Defines the ``CommentRepository`` protocol the statistics aggregator
depends on, the repository exceptions, and an in-memory implementation
that the service is backed by. Queries filter by author only; whether
an access-control predicate is applied is an explicit ``access_check``
argument rather than an implicit default.
"""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Protocol

from comment_stats.models import Comment, ContentItem, User

logger = logging.getLogger(__name__)

# Anonymous visitors resolve to this UID.
ANONYMOUS_UID = 0


class CommentOrder(Enum):
    """Sort orders supported by ``find_by_author``."""

    # Newest first; equal timestamps fall back to the higher comment ID.
    CREATED_DESC = "created_desc"
    CREATED_ASC = "created_asc"


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------


class RepositoryError(Exception):
    """Base exception for comment-repository errors."""


class RepositoryUnavailableError(RepositoryError):
    """Raised when the backing store cannot be reached.

    Fatal for the current request. Nothing is retried.
    """


class DanglingReferenceError(RepositoryError):
    """Raised when a comment's content item no longer exists.

    The content item was deleted or the reference is broken.
    """


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class CommentRepository(Protocol):
    """Read interface over comment, content-item and user records."""

    def count_by_author(self, uid: int, *, access_check: bool = False) -> int: ...

    def find_by_author(
        self,
        uid: int,
        *,
        order_by: CommentOrder,
        limit: int,
        access_check: bool = False,
    ) -> list[Comment]: ...

    def find_all_by_author(self, uid: int, *, access_check: bool = False) -> list[Comment]: ...

    def resolve_target_title(self, comment: Comment) -> str: ...

    def find_user(self, uid: int) -> User | None: ...


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------


def _sort_key(comment: Comment) -> tuple[float, int]:
    return comment.created.timestamp(), comment.cid


class InMemoryCommentRepository:
    """Comment repository held in process memory.

    Records are loaded via the ``add_*`` helpers or ``load_seed()``.
    Setting ``available`` to ``False`` makes every read raise
    ``RepositoryUnavailableError``.
    """

    def __init__(self) -> None:
        self._users: dict[int, User] = {ANONYMOUS_UID: User(uid=ANONYMOUS_UID, name="Anonymous")}
        self._content: dict[int, ContentItem] = {}
        self._comments: dict[int, Comment] = {}
        self.available = True

    # -- internal helpers ----------------------------------------------------

    def _ensure_available(self) -> None:
        if not self.available:
            raise RepositoryUnavailableError("Comment storage is unavailable.")

    def _select(self, uid: int, access_check: bool) -> list[Comment]:
        self._ensure_available()
        return [
            comment
            for comment in self._comments.values()
            if comment.author_uid == uid and (comment.published or not access_check)
        ]

    # -- writes (seeding) ----------------------------------------------------

    def add_user(self, user: User) -> None:
        self._users[user.uid] = user

    def add_content(self, item: ContentItem) -> None:
        self._content[item.content_id] = item

    def add_comment(self, comment: Comment) -> None:
        self._comments[comment.cid] = comment

    def delete_content(self, content_id: int) -> None:
        """Delete a content item, leaving its comments dangling."""
        self._content.pop(content_id, None)

    def load_seed(self, data: Mapping[str, Any]) -> None:
        """Load users, content items and comments from a seed document.

        Args:
            data: Mapping with optional ``users``, ``content`` and
                ``comments`` lists, each entry shaped like the
                corresponding model.

        Raises:
            pydantic.ValidationError: If an entry does not match its model.
        """
        for raw in data.get("users", []):
            self.add_user(User.model_validate(raw))
        for raw in data.get("content", []):
            self.add_content(ContentItem.model_validate(raw))
        for raw in data.get("comments", []):
            self.add_comment(Comment.model_validate(raw))

        logger.info(
            "Loaded seed data: %d user(s), %d content item(s), %d comment(s)",
            len(self._users),
            len(self._content),
            len(self._comments),
        )

    # -- CommentRepository ---------------------------------------------------

    def count_by_author(self, uid: int, *, access_check: bool = False) -> int:
        return len(self._select(uid, access_check))

    def find_by_author(
        self,
        uid: int,
        *,
        order_by: CommentOrder,
        limit: int,
        access_check: bool = False,
    ) -> list[Comment]:
        comments = sorted(
            self._select(uid, access_check),
            key=_sort_key,
            reverse=order_by is CommentOrder.CREATED_DESC,
        )
        return comments[:limit]

    def find_all_by_author(self, uid: int, *, access_check: bool = False) -> list[Comment]:
        return sorted(self._select(uid, access_check), key=lambda c: c.cid)

    def resolve_target_title(self, comment: Comment) -> str:
        self._ensure_available()
        item = self._content.get(comment.target_content_id)
        if item is None:
            raise DanglingReferenceError(
                f"Comment {comment.cid} references missing content item {comment.target_content_id}."
            )
        return item.title

    def find_user(self, uid: int) -> User | None:
        self._ensure_available()
        return self._users.get(uid)


# Module-level singleton used across the application.
comment_repository = InMemoryCommentRepository()
