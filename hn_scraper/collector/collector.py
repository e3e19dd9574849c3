"""Resolves a thread into its direct child comments, using the cache when possible."""

import asyncio
import logging
from contextlib import nullcontext
from typing import List, Union

from hn_scraper.errors import DecodeError, HNScraperError, TransportError
from hn_scraper.hn_client import HNClient
from hn_scraper.models.comment import CommentRecord, FetchFailure, ResolveResult
from hn_scraper.storage.data_sink import CommentCache

logger = logging.getLogger(__name__)


class ThreadCollector:
    """Fetches every direct comment of a thread concurrently."""

    def __init__(
        self,
        hn_client: HNClient,
        cache: CommentCache,
        max_concurrency: int = 100,
        tolerate_child_failures: bool = False,
        prometheus_exporter=None,
    ):
        """
        Initialize the thread collector.

        Args:
            hn_client: Client for the item API
            cache: Cache of previously resolved threads
            max_concurrency: Maximum number of comment requests in flight
            tolerate_child_failures: Collect failed comment fetches instead of aborting
            prometheus_exporter: Optional metrics exporter
        """
        self.hn_client = hn_client
        self.cache = cache
        self.max_concurrency = max_concurrency
        self.tolerate_child_failures = tolerate_child_failures
        self.prometheus_exporter = prometheus_exporter

    def _timer(self):
        if self.prometheus_exporter:
            return self.prometheus_exporter.time_request()
        return nullcontext()

    def _record_error(self, error: HNScraperError) -> None:
        if self.prometheus_exporter:
            error_type = "decode" if isinstance(error, DecodeError) else "transport"
            self.prometheus_exporter.record_api_error(error_type)

    async def _fetch_child(
        self,
        comment_id: int,
        semaphore: asyncio.Semaphore,
    ) -> Union[CommentRecord, FetchFailure]:
        async with semaphore:
            try:
                with self._timer():
                    comment = await self.hn_client.fetch_comment(comment_id)
            except (TransportError, DecodeError) as e:
                self._record_error(e)
                if not self.tolerate_child_failures:
                    raise
                logger.warning(f"Skipping comment {comment_id}: {e}")
                return FetchFailure(item_id=comment_id, reason=str(e))

        if self.prometheus_exporter:
            self.prometheus_exporter.record_item_fetched("comment")
        return comment

    async def fetch_comments(self, comment_ids: List[int]) -> ResolveResult:
        """
        Fetch comments concurrently and collect them as they complete.

        The returned list is in completion order. In strict mode the first
        failure cancels the remaining fetches and is re-raised.

        Args:
            comment_ids: IDs of the comments to fetch

        Returns:
            ResolveResult with thread_id 0; callers fill in the thread
        """
        result = ResolveResult(thread_id=0)
        if not comment_ids:
            return result

        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks = [asyncio.create_task(self._fetch_child(comment_id, semaphore)) for comment_id in comment_ids]

        try:
            for next_done in asyncio.as_completed(tasks):
                outcome = await next_done
                if isinstance(outcome, FetchFailure):
                    result.failures.append(outcome)
                else:
                    result.comments.append(outcome)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return result

    async def resolve_thread(self, thread_id: int) -> ResolveResult:
        """
        Resolve a thread into its direct child comments.

        A cached thread is returned as-is without touching the network.
        Otherwise the thread is fetched, its comments are fetched
        concurrently and a complete result is written to the cache.

        Args:
            thread_id: ID of the thread's root item

        Returns:
            ResolveResult with the comments in completion order

        Raises:
            TransportError, DecodeError: If the thread, or in strict mode any comment, cannot be fetched
            CacheReadError, CacheWriteError: On cache failures
        """
        cached = self.cache.load(thread_id)
        if self.prometheus_exporter:
            self.prometheus_exporter.record_cache_lookup(cached is not None)
        if cached is not None:
            logger.info(f"Using {len(cached)} cached comments for thread {thread_id}")
            return ResolveResult(thread_id=thread_id, comments=cached, from_cache=True)

        logger.info(f"Thread {thread_id} not cached, fetching from {self.hn_client.base_url}")
        try:
            with self._timer():
                thread = await self.hn_client.fetch_thread(thread_id)
        except (TransportError, DecodeError) as e:
            self._record_error(e)
            raise
        if self.prometheus_exporter:
            self.prometheus_exporter.record_item_fetched("thread")

        kids = thread["kids"]
        logger.info(f"Fetching {len(kids)} comments for thread {thread_id}")
        result = await self.fetch_comments(kids)
        result.thread_id = thread_id

        if result.complete:
            self.cache.store(thread_id, result.comments)
        else:
            logger.warning(
                f"{len(result.failures)} of {len(kids)} comments for thread {thread_id} "
                f"could not be fetched; not caching a partial thread"
            )

        logger.info(f"Resolved {len(result.comments)} comments for thread {thread_id}")
        return result


def sort_comments(comments: List[CommentRecord]) -> List[CommentRecord]:
    """Order comments by ID, for stable output across runs."""
    return sorted(comments, key=lambda comment: comment["id"])
