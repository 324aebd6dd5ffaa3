"""Formats a StatsSummary into render-ready plain strings."""

from comment_stats.models import RecentComment, StatsSummary


def format_recent_comment(recent: RecentComment) -> str:
    return f"{recent.subject} (Node: {recent.content_title})"


def render_summary(summary: StatsSummary) -> list[str]:
    """Return the display lines for ``summary``.

    The totals come first, then a header, then one line per recent
    comment. No markup is emitted.
    """
    return [
        f"Total comments: {summary.total_comments}",
        f"Total words in comments: {summary.total_words}",
        "Last 5 comments:",
        *(format_recent_comment(recent) for recent in summary.recent_comments),
    ]
