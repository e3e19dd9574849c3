"""Keyword filtering of comment text."""

from typing import Iterable, List, Sequence

from hn_scraper.models.comment import CommentRecord


def parse_keywords(raw: str) -> List[str]:
    """Split a space-separated keyword string; blank input means no keywords."""
    return raw.split() if raw else []


def matches(text: str, keywords: Sequence[str]) -> bool:
    """
    Check whether text contains any of the keywords, ignoring case.

    An empty keyword list matches everything.
    """
    if not keywords:
        return True

    lower_text = text.lower()
    return any(keyword.lower() in lower_text for keyword in keywords)


def filter_comments(comments: Iterable[CommentRecord], keywords: Sequence[str]) -> List[CommentRecord]:
    """Keep the comments whose text matches, preserving their order."""
    return [comment for comment in comments if matches(comment["text"], keywords)]
