"""Prometheus metrics for monitoring the Hacker News thread scraper."""

import logging
import time
from typing import Optional

from prometheus_client import REGISTRY, Counter, Histogram, write_to_textfile

logger = logging.getLogger(__name__)

# Define metrics
ITEMS_FETCHED = Counter(
    "hn_scraper_items_fetched_total",
    "Number of items fetched from the Hacker News API",
    ["item_type"],
)

CACHE_LOOKUPS = Counter(
    "hn_scraper_cache_lookups_total",
    "Number of thread cache lookups",
    ["result"],
)

API_ERRORS = Counter(
    "hn_scraper_api_errors_total",
    "Number of API errors encountered",
    ["error_type"],
)

COMMENTS_WRITTEN = Counter(
    "hn_scraper_comments_written_total",
    "Number of filtered comments written to the output",
)

REQUEST_DURATION = Histogram(
    "hn_scraper_request_duration_seconds",
    "Duration of API requests in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)


class PrometheusExporter:
    """Records scraper metrics and writes them out for the textfile collector."""

    def __init__(self, textfile_path: Optional[str] = None):
        """
        Initialize the Prometheus exporter.

        Args:
            textfile_path: File to write metrics to at the end of a run
        """
        self.textfile_path = textfile_path

    def record_item_fetched(self, item_type: str) -> None:
        """
        Record a fetched item.

        Args:
            item_type: Kind of item ('thread' or 'comment')
        """
        ITEMS_FETCHED.labels(item_type=item_type).inc()

    def record_cache_lookup(self, hit: bool) -> None:
        """Record a cache hit or miss."""
        CACHE_LOOKUPS.labels(result="hit" if hit else "miss").inc()

    def record_api_error(self, error_type: str) -> None:
        """
        Record an API error.

        Args:
            error_type: Type of API error ('transport' or 'decode')
        """
        API_ERRORS.labels(error_type=error_type).inc()

    def record_comments_written(self, count: int) -> None:
        """Record how many comments reached the output."""
        COMMENTS_WRITTEN.inc(count)

    def time_request(self) -> "RequestTimer":
        """
        Create a context manager for timing API requests.

        Returns:
            RequestTimer context manager
        """
        return RequestTimer()

    def write_textfile(self) -> bool:
        """
        Write the default registry to the configured textfile.

        Returns:
            True if the file was written
        """
        if not self.textfile_path:
            return False

        try:
            write_to_textfile(self.textfile_path, REGISTRY)
        except OSError as e:
            logger.error(f"Failed to write metrics to {self.textfile_path}: {str(e)}")
            return False

        logger.info(f"Wrote metrics to {self.textfile_path}")
        return True


class RequestTimer:
    """Context manager for timing API requests."""

    def __init__(self):
        self.start_time: Optional[float] = None

    def __enter__(self) -> "RequestTimer":
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is not None:
            duration = time.time() - self.start_time
            REQUEST_DURATION.observe(duration)
