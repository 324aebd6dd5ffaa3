"""Tests for comment_stats.aggregator module."""

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from conftest import AUTHOR_UID, OTHER_UID

from comment_stats.aggregator import CommentStatsAggregator
from comment_stats.models import Comment, ContentItem, RecentComment, StatsSummary
from comment_stats.repository import (
    CommentOrder,
    InMemoryCommentRepository,
    RepositoryUnavailableError,
)

SILENT_UID = 99


def _recent_pairs(recent: list[RecentComment]) -> list[tuple[str, str]]:
    return [(r.subject, r.content_title) for r in recent]


# ---------------------------------------------------------------------------
# compute_summary
# ---------------------------------------------------------------------------


class TestComputeSummary:
    """Tests for the compute_summary method."""

    def test_seven_comment_scenario(self, repository: InMemoryCommentRepository) -> None:
        """Return totals and the five most recent comments, newest first."""
        summary = CommentStatsAggregator(repository).compute_summary(AUTHOR_UID)

        assert summary.total_comments == 7
        assert summary.total_words == 23
        assert _recent_pairs(summary.recent_comments) == [
            ("s7", "T7"),
            ("s6", "T6"),
            ("s5", "T5"),
            ("s4", "T4"),
            ("s3", "T3"),
        ]

    def test_user_without_comments(self, repository: InMemoryCommentRepository) -> None:
        """Return an all-zero summary for a user who never commented."""
        summary = CommentStatsAggregator(repository).compute_summary(SILENT_UID)
        assert summary == StatsSummary(total_comments=0, total_words=0, recent_comments=[])

    def test_other_authors_excluded(self, repository: InMemoryCommentRepository) -> None:
        """Only comments authored by the requested user are counted."""
        summary = CommentStatsAggregator(repository).compute_summary(OTHER_UID)
        assert summary.total_comments == 1
        assert summary.total_words == 3
        assert _recent_pairs(summary.recent_comments) == [("bob's", "T1")]

    def test_recent_length_is_min_of_five_and_total(self) -> None:
        """Return as many recent entries as comments when fewer than five exist."""
        repo = InMemoryCommentRepository()
        repo.add_content(ContentItem(content_id=1, title="Node"))
        for cid in range(1, 4):
            repo.add_comment(
                Comment(
                    cid=cid,
                    author_uid=AUTHOR_UID,
                    created=datetime(2024, 1, cid, tzinfo=UTC),
                    subject=f"c{cid}",
                    target_content_id=1,
                )
            )

        summary = CommentStatsAggregator(repo).compute_summary(AUTHOR_UID)

        assert summary.total_comments == 3
        assert [r.subject for r in summary.recent_comments] == ["c3", "c2", "c1"]

    def test_dangling_target_shrinks_without_backfill(self, repository: InMemoryCommentRepository) -> None:
        """Drop a recent comment whose content item was deleted, without backfilling."""
        repository.delete_content(105)

        summary = CommentStatsAggregator(repository).compute_summary(AUTHOR_UID)

        assert len(summary.recent_comments) == 4
        assert _recent_pairs(summary.recent_comments) == [
            ("s7", "T7"),
            ("s6", "T6"),
            ("s4", "T4"),
            ("s3", "T3"),
        ]
        # Totals still include the dangling comment.
        assert summary.total_comments == 7
        assert summary.total_words == 23

    def test_unpublished_comments_counted(self, repository: InMemoryCommentRepository) -> None:
        """Count comments regardless of moderation state."""
        repository.add_comment(
            Comment(
                cid=8,
                author_uid=AUTHOR_UID,
                created=datetime(2024, 2, 1, tzinfo=UTC),
                subject="pending",
                body="awaiting moderation",
                target_content_id=101,
                published=False,
            )
        )

        summary = CommentStatsAggregator(repository).compute_summary(AUTHOR_UID)

        assert summary.total_comments == 8
        assert summary.total_words == 25
        assert summary.recent_comments[0] == RecentComment(subject="pending", content_title="T1")

    def test_empty_and_missing_bodies_contribute_zero(self) -> None:
        """Comments without a body add nothing to the word count."""
        repo = InMemoryCommentRepository()
        repo.add_content(ContentItem(content_id=1, title="Node"))
        for cid, body in [(1, None), (2, ""), (3, "<p></p>"), (4, "two words")]:
            repo.add_comment(
                Comment(
                    cid=cid,
                    author_uid=AUTHOR_UID,
                    created=datetime(2024, 1, cid, tzinfo=UTC),
                    body=body,
                    target_content_id=1,
                )
            )

        summary = CommentStatsAggregator(repo).compute_summary(AUTHOR_UID)

        assert summary.total_comments == 4
        assert summary.total_words == 2

    def test_literal_angle_brackets_counted(self) -> None:
        """Count words around < and > that are plain text, not tags."""
        repo = InMemoryCommentRepository()
        repo.add_content(ContentItem(content_id=1, title="Node"))
        repo.add_comment(
            Comment(
                cid=1,
                author_uid=AUTHOR_UID,
                created=datetime(2024, 1, 1, tzinfo=UTC),
                body="x < y and y > z",
                target_content_id=1,
            )
        )

        assert CommentStatsAggregator(repo).compute_summary(AUTHOR_UID).total_words == 7

    def test_equal_timestamps_order_by_comment_id(self) -> None:
        """Break ties in creation time by the higher comment ID first."""
        repo = InMemoryCommentRepository()
        repo.add_content(ContentItem(content_id=1, title="Node"))
        same_time = datetime(2024, 3, 1, tzinfo=UTC)
        for cid in (4, 2, 9, 6):
            repo.add_comment(
                Comment(
                    cid=cid,
                    author_uid=AUTHOR_UID,
                    created=same_time,
                    subject=f"c{cid}",
                    target_content_id=1,
                )
            )

        summary = CommentStatsAggregator(repo).compute_summary(AUTHOR_UID)

        assert [r.subject for r in summary.recent_comments] == ["c9", "c6", "c4", "c2"]

    def test_repository_unavailable_propagates(self, repository: InMemoryCommentRepository) -> None:
        """Raise RepositoryUnavailableError instead of returning a partial summary."""
        repository.available = False
        with pytest.raises(RepositoryUnavailableError):
            CommentStatsAggregator(repository).compute_summary(AUTHOR_UID)

    def test_failure_mid_computation_propagates(self) -> None:
        """An outage on a later query still fails the whole computation."""
        repo = MagicMock()
        repo.count_by_author.return_value = 2
        repo.find_by_author.return_value = []
        repo.find_all_by_author.side_effect = RepositoryUnavailableError("down")

        with pytest.raises(RepositoryUnavailableError, match="down"):
            CommentStatsAggregator(repo).compute_summary(AUTHOR_UID)


# ---------------------------------------------------------------------------
# Repository interaction
# ---------------------------------------------------------------------------


class TestRepositoryQueries:
    """Tests for how the aggregator queries its repository."""

    def test_queries_bypass_access_checks(self) -> None:
        """Every query is issued with access_check=False."""
        repo = MagicMock()
        repo.count_by_author.return_value = 0
        repo.find_by_author.return_value = []
        repo.find_all_by_author.return_value = []

        CommentStatsAggregator(repo).compute_summary(AUTHOR_UID)

        repo.count_by_author.assert_called_once_with(AUTHOR_UID, access_check=False)
        repo.find_by_author.assert_called_once_with(
            AUTHOR_UID,
            order_by=CommentOrder.CREATED_DESC,
            limit=5,
            access_check=False,
        )
        repo.find_all_by_author.assert_called_once_with(AUTHOR_UID, access_check=False)

    def test_custom_recent_limit(self, repository: InMemoryCommentRepository) -> None:
        """Honour a smaller recent_limit."""
        recent = CommentStatsAggregator(repository, recent_limit=2).get_recent_comments(AUTHOR_UID)
        assert [r.subject for r in recent] == ["s7", "s6"]

    @pytest.mark.parametrize("limit", [-1, 6])
    def test_invalid_recent_limit(self, limit: int) -> None:
        """Reject limits outside 0..5."""
        with pytest.raises(ValueError, match="recent_limit"):
            CommentStatsAggregator(MagicMock(), recent_limit=limit)
