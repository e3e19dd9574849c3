"""Tests for the monitoring module."""

import os
import tempfile
import unittest
from unittest.mock import patch

from hn_scraper.monitoring.metrics import PrometheusExporter, RequestTimer


class TestPrometheusExporter(unittest.TestCase):
    """Test cases for the PrometheusExporter class."""

    def setUp(self):
        """Set up test environment."""
        self.exporter = PrometheusExporter()

    def test_record_item_fetched(self):
        with patch("hn_scraper.monitoring.metrics.ITEMS_FETCHED") as mock_counter:
            self.exporter.record_item_fetched("comment")

            mock_counter.labels.assert_called_once_with(item_type="comment")
            mock_counter.labels.return_value.inc.assert_called_once()

    def test_record_cache_lookup(self):
        with patch("hn_scraper.monitoring.metrics.CACHE_LOOKUPS") as mock_counter:
            self.exporter.record_cache_lookup(True)
            self.exporter.record_cache_lookup(False)

            mock_counter.labels.assert_any_call(result="hit")
            mock_counter.labels.assert_any_call(result="miss")

    def test_record_api_error(self):
        with patch("hn_scraper.monitoring.metrics.API_ERRORS") as mock_counter:
            self.exporter.record_api_error("transport")

            mock_counter.labels.assert_called_once_with(error_type="transport")
            mock_counter.labels.return_value.inc.assert_called_once()

    def test_record_comments_written(self):
        with patch("hn_scraper.monitoring.metrics.COMMENTS_WRITTEN") as mock_counter:
            self.exporter.record_comments_written(3)

            mock_counter.inc.assert_called_once_with(3)

    def test_time_request(self):
        with patch("hn_scraper.monitoring.metrics.REQUEST_DURATION") as mock_histogram:
            with self.exporter.time_request() as timer:
                self.assertIsInstance(timer, RequestTimer)

            mock_histogram.observe.assert_called_once()

    def test_write_textfile_disabled(self):
        self.assertFalse(self.exporter.write_textfile())

    def test_write_textfile(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = os.path.join(temp_dir, "hn.prom")
            exporter = PrometheusExporter(textfile_path=path)

            self.assertTrue(exporter.write_textfile())
            with open(path, encoding="utf-8") as f:
                self.assertIn("hn_scraper_cache_lookups_total", f.read())

    def test_write_textfile_failure_is_logged(self):
        exporter = PrometheusExporter(textfile_path="/nonexistent-dir/hn.prom")
        with patch("hn_scraper.monitoring.metrics.write_to_textfile", side_effect=OSError("read-only")):
            with self.assertLogs("hn_scraper.monitoring.metrics", level="ERROR"):
                self.assertFalse(exporter.write_textfile())


if __name__ == "__main__":
    unittest.main()
