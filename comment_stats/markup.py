"""Markup stripping and word counting for comment bodies."""

from bs4 import BeautifulSoup


def strip_markup(text: str | None) -> str:
    """Remove HTML tags and comments from ``text``.

    Text nodes are joined without a separator, so adding or removing
    markup never changes the word count of the result. A ``<`` or
    ``>`` that does not form a tag is kept as text.

    Args:
        text: Raw comment body, possibly ``None``.

    Returns:
        The text content with all markup removed (``""`` for ``None``).
    """
    if not text:
        return ""
    return BeautifulSoup(text, "html.parser").get_text()


def count_words(text: str | None) -> int:
    """Count maximal whitespace-delimited tokens in ``text``."""
    if not text:
        return 0
    return len(text.split())
