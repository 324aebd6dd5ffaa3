"""Shared fixtures for Comment Stats tests."""

from datetime import UTC, datetime, timedelta

import pytest

from comment_stats.models import Comment, ContentItem, User
from comment_stats.repository import InMemoryCommentRepository

AUTHOR_UID = 7
OTHER_UID = 8

# Bodies for comments C1..C7, oldest first; word counts 3, 5, 2, 4, 1, 6, 2.
SAMPLE_BODIES = [
    "one two three",
    "<p>alpha beta gamma delta epsilon</p>",
    "hello   world",
    "<em>four</em> words <b>right</b> here",
    "single",
    "six words in this <a href='#'>comment</a> body",
    "<!-- hidden note --> last one",
]

BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)


@pytest.fixture()
def repository() -> InMemoryCommentRepository:
    """Return a repository where AUTHOR_UID has seven comments on seven content items."""
    repo = InMemoryCommentRepository()
    repo.add_user(User(uid=AUTHOR_UID, name="alice"))
    repo.add_user(User(uid=OTHER_UID, name="bob"))

    for i, body in enumerate(SAMPLE_BODIES, start=1):
        repo.add_content(ContentItem(content_id=100 + i, title=f"T{i}"))
        repo.add_comment(
            Comment(
                cid=i,
                author_uid=AUTHOR_UID,
                created=BASE_TIME + timedelta(hours=i),
                subject=f"s{i}",
                body=body,
                target_content_id=100 + i,
            )
        )

    # A comment by someone else must never leak into AUTHOR_UID's stats.
    repo.add_comment(
        Comment(
            cid=50,
            author_uid=OTHER_UID,
            created=BASE_TIME + timedelta(days=1),
            subject="bob's",
            body="not counted here",
            target_content_id=101,
        )
    )
    return repo
