"""Data models for Hacker News threads and comments."""

from dataclasses import dataclass, field
from typing import List, TypedDict


class CommentRecord(TypedDict):
    """
    A single comment as written to the cache and to the output file.

    Field names follow the Hacker News item API so cache files stay
    readable by anything that understands the upstream format.
    """
    by: str  # Author username ("" for deleted comments)
    id: int  # Comment item ID
    parent: int  # ID of the item this comment replies to
    text: str  # Comment body with HTML entities unescaped


class ThreadRecord(TypedDict):
    """Root item of a discussion; only its direct children are of interest."""
    id: int
    kids: List[int]


COMMENT_FIELDS = ("by", "id", "parent", "text")


@dataclass
class FetchFailure:
    """A child comment that could not be fetched in tolerant mode."""

    item_id: int
    reason: str


@dataclass
class ResolveResult:
    """Outcome of resolving a thread into its direct child comments."""

    thread_id: int
    comments: List[CommentRecord] = field(default_factory=list)
    failures: List[FetchFailure] = field(default_factory=list)
    from_cache: bool = False

    @property
    def complete(self) -> bool:
        """True when every child comment was resolved."""
        return not self.failures
