"""Per-user comment statistics.

Issues three read-only queries against a comment repository (count,
most recent, all) and combines them into a ``StatsSummary``. Every
query bypasses access checks: this is an internal statistics view
that counts unpublished comments too.
"""

import logging

from comment_stats.markup import count_words, strip_markup
from comment_stats.models import RECENT_COMMENTS_MAX, RecentComment, StatsSummary
from comment_stats.repository import CommentOrder, CommentRepository, DanglingReferenceError

logger = logging.getLogger(__name__)


class CommentStatsAggregator:
    """Computes comment statistics for a user from a comment repository.

    The aggregator holds no state between calls; each
    ``compute_summary()`` reads everything afresh. Repository errors
    other than dangling content references propagate to the caller.
    """

    def __init__(self, repository: CommentRepository, recent_limit: int = RECENT_COMMENTS_MAX) -> None:
        if not 0 <= recent_limit <= RECENT_COMMENTS_MAX:
            raise ValueError(f"recent_limit must be between 0 and {RECENT_COMMENTS_MAX}, got {recent_limit}")
        self._repository = repository
        self._recent_limit = recent_limit

    def get_total_comments(self, uid: int) -> int:
        """Return how many comments ``uid`` has authored, in any moderation state."""
        return self._repository.count_by_author(uid, access_check=False)

    def get_recent_comments(self, uid: int) -> list[RecentComment]:
        """Return the user's most recent comments with their content titles.

        Comments whose content item cannot be resolved are skipped. The
        list is not backfilled with older comments, so it may hold fewer
        than ``recent_limit`` entries.

        Args:
            uid: The author's user ID.

        Returns:
            Recent comments ordered newest first.

        Raises:
            RepositoryUnavailableError: If the repository cannot be reached.
        """
        comments = self._repository.find_by_author(
            uid,
            order_by=CommentOrder.CREATED_DESC,
            limit=self._recent_limit,
            access_check=False,
        )

        recent: list[RecentComment] = []
        for comment in comments:
            try:
                title = self._repository.resolve_target_title(comment)
            except DanglingReferenceError:
                logger.debug("Skipping comment %s with dangling content reference", comment.cid)
                continue
            recent.append(RecentComment(subject=comment.subject, content_title=title))
        return recent

    def get_total_words(self, uid: int) -> int:
        """Return the word count across all of the user's comment bodies."""
        comments = self._repository.find_all_by_author(uid, access_check=False)
        return sum(count_words(strip_markup(comment.body)) for comment in comments)

    def compute_summary(self, uid: int) -> StatsSummary:
        """Build the comment statistics summary for ``uid``.

        A user without comments yields an all-zero summary.

        Args:
            uid: The user ID to compute statistics for.

        Returns:
            StatsSummary with totals and the recent-comments list.

        Raises:
            RepositoryUnavailableError: If any repository read fails.
                No partial summary is returned.
        """
        total_comments = self.get_total_comments(uid)
        recent_comments = self.get_recent_comments(uid)
        total_words = self.get_total_words(uid)

        logger.info(
            "Computed comment stats for uid=%s: %d comment(s), %d word(s), %d recent",
            uid,
            total_comments,
            total_words,
            len(recent_comments),
        )
        return StatsSummary(
            total_comments=total_comments,
            total_words=total_words,
            recent_comments=recent_comments,
        )
