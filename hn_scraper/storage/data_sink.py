"""Defines the CommentCache protocol for cache backends."""

from typing import List, Optional, Protocol

from hn_scraper.models.comment import CommentRecord


class CommentCache(Protocol):
    """
    A protocol that defines the interface for resolved-thread caches.

    Any backend keyed by thread ID can be handed to the collector, which
    only relies on ``load`` and ``store``.
    """

    def load(self, thread_id: int) -> Optional[List[CommentRecord]]:
        """
        Load the cached comments for a thread.

        Args:
            thread_id: ID of the thread's root item.

        Returns:
            The cached comments, or None when the thread has not been cached.
        """
        ...

    def store(self, thread_id: int, comments: List[CommentRecord]) -> None:
        """
        Persist the resolved comments for a thread.

        Args:
            thread_id: ID of the thread's root item.
            comments: Every direct child comment of the thread.
        """
        ...
