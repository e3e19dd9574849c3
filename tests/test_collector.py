"""Tests for the thread collector."""

import asyncio
import os
import tempfile
import unittest
from unittest.mock import MagicMock

from hn_scraper.collector.collector import ThreadCollector, sort_comments
from hn_scraper.config import Config
from hn_scraper.errors import DecodeError, TransportError
from hn_scraper.hn_client import HNClient
from hn_scraper.storage.json_cache import JsonCacheStore
from tests.stubs.hn_api_stub import FakeSession, thread_items


class TestThreadCollector(unittest.TestCase):
    """Test cases for the ThreadCollector class."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.cache = JsonCacheStore(os.path.join(self.temp_dir.name, "cache"))
        self.client = HNClient(Config(cache_dir=self.temp_dir.name))
        self.mock_prometheus_exporter = MagicMock()

        self.thread_id = 9996333
        self.items = thread_items(self.thread_id, [
            {"id": 1001, "by": "alice", "text": "I &amp; you"},
            {"id": 1002, "by": "bob", "text": "Hiring in Berlin"},
            {"id": 1003, "by": "carol", "text": "Remote only"},
        ])

    def tearDown(self):
        """Clean up test environment."""
        self.temp_dir.cleanup()

    def make_collector(self, session, **kwargs):
        self.client._session = session
        return ThreadCollector(self.client, self.cache, prometheus_exporter=self.mock_prometheus_exporter, **kwargs)

    def test_resolve_fetches_every_child(self):
        """Test N kids resolve to exactly N comments."""
        session = FakeSession(items=self.items)
        collector = self.make_collector(session)

        result = asyncio.run(collector.resolve_thread(self.thread_id))

        self.assertFalse(result.from_cache)
        self.assertTrue(result.complete)
        self.assertEqual(sorted(c["id"] for c in result.comments), [1001, 1002, 1003])
        self.assertEqual(sorted(session.requested), [1001, 1002, 1003, self.thread_id])
        texts = {c["id"]: c["text"] for c in result.comments}
        self.assertEqual(texts[1001], "I & you")

    def test_resolve_writes_cache(self):
        collector = self.make_collector(FakeSession(items=self.items))

        result = asyncio.run(collector.resolve_thread(self.thread_id))

        self.assertEqual(self.cache.load(self.thread_id), result.comments)
        self.mock_prometheus_exporter.record_cache_lookup.assert_called_once_with(False)

    def test_cached_thread_makes_no_requests(self):
        """Test that a second resolution is served from the cache."""
        first_session = FakeSession(items=self.items)
        collector = self.make_collector(first_session)
        first = asyncio.run(collector.resolve_thread(self.thread_id))

        second_session = FakeSession(items=self.items)
        collector = self.make_collector(second_session)
        second = asyncio.run(collector.resolve_thread(self.thread_id))

        self.assertTrue(second.from_cache)
        self.assertEqual(second_session.requested, [])
        self.assertEqual(sorted(second.comments, key=lambda c: c["id"]), sorted(first.comments, key=lambda c: c["id"]))

    def test_results_in_completion_order(self):
        """Test the list reflects completion order rather than kids order."""
        session = FakeSession(items=self.items, delays={1001: 0.05, 1002: 0.02})
        collector = self.make_collector(session)

        result = asyncio.run(collector.resolve_thread(self.thread_id))

        self.assertEqual([c["id"] for c in result.comments], [1003, 1002, 1001])
        self.assertEqual([c["id"] for c in sort_comments(result.comments)], [1001, 1002, 1003])

    def test_concurrency_is_bounded(self):
        kids = [{"id": 2000 + i, "by": "u", "text": "x"} for i in range(20)]
        session = FakeSession(
            items=thread_items(1, kids),
            delays={kid["id"]: 0.01 for kid in kids},
        )
        collector = self.make_collector(session, max_concurrency=4)

        result = asyncio.run(collector.resolve_thread(1))

        self.assertEqual(len(result.comments), 20)
        self.assertLessEqual(session.max_in_flight, 4)
        self.assertGreater(session.max_in_flight, 1)

    def test_child_failure_is_fatal(self):
        """Test a failing comment aborts the run and leaves no cache entry."""
        session = FakeSession(items=self.items, errors={1002: 500})
        collector = self.make_collector(session)

        with self.assertRaises(TransportError):
            asyncio.run(collector.resolve_thread(self.thread_id))

        self.assertIsNone(self.cache.load(self.thread_id))
        self.mock_prometheus_exporter.record_api_error.assert_called_with("transport")

    def test_child_failure_never_stores(self):
        mock_cache = MagicMock()
        mock_cache.load.return_value = None
        self.client._session = FakeSession(items=self.items, errors={1001: 404})
        collector = ThreadCollector(self.client, mock_cache)

        with self.assertRaises(TransportError):
            asyncio.run(collector.resolve_thread(self.thread_id))

        mock_cache.store.assert_not_called()

    def test_tolerant_mode_collects_failures(self):
        """Test failed comments are reported and the partial thread is not cached."""
        session = FakeSession(items=self.items, errors={1002: 502}, raw_bodies={1003: "oops"})
        collector = self.make_collector(session, tolerate_child_failures=True)

        result = asyncio.run(collector.resolve_thread(self.thread_id))

        self.assertEqual([c["id"] for c in result.comments], [1001])
        self.assertEqual(sorted(f.item_id for f in result.failures), [1002, 1003])
        self.assertFalse(result.complete)
        self.assertIsNone(self.cache.load(self.thread_id))

    def test_tolerant_mode_records_undecodable_body(self):
        session = FakeSession(items=self.items, raw_bodies={1003: b'{"id": 1003, "text": "\xff\xfe"}'})
        collector = self.make_collector(session, tolerate_child_failures=True)

        result = asyncio.run(collector.resolve_thread(self.thread_id))

        self.assertEqual(sorted(c["id"] for c in result.comments), [1001, 1002])
        self.assertEqual([f.item_id for f in result.failures], [1003])
        self.mock_prometheus_exporter.record_api_error.assert_called_once_with("decode")

    def test_thread_failure_is_fatal_in_tolerant_mode(self):
        collector = self.make_collector(FakeSession(), tolerate_child_failures=True)

        with self.assertRaises(DecodeError):
            asyncio.run(collector.resolve_thread(self.thread_id))

        self.mock_prometheus_exporter.record_api_error.assert_called_once_with("decode")

    def test_thread_without_comments(self):
        session = FakeSession(items={5: {"id": 5, "type": "story"}})
        collector = self.make_collector(session)

        result = asyncio.run(collector.resolve_thread(5))

        self.assertEqual(result.comments, [])
        self.assertEqual(self.cache.load(5), [])

    def test_fetch_comments_empty(self):
        collector = self.make_collector(FakeSession())
        result = asyncio.run(collector.fetch_comments([]))
        self.assertEqual(result.comments, [])
        self.assertEqual(result.failures, [])


if __name__ == "__main__":
    unittest.main()
