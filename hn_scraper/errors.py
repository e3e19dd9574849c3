"""Error types raised by the Hacker News thread scraper."""

from typing import Optional


class HNScraperError(Exception):
    """Base class for every error the scraper reports to the user."""

    def __init__(self, message: str, item_id: Optional[int] = None):
        self.message = message
        self.item_id = item_id
        super().__init__(self.message)


class TransportError(HNScraperError):
    """Network failure, timeout or non-2xx response while fetching an item."""

    def __init__(self, item_id: int, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(f"Failed to fetch item {item_id}: {message}", item_id=item_id)


class DecodeError(HNScraperError):
    """Item payload was not valid JSON or did not have the expected shape."""

    def __init__(self, item_id: int, message: str):
        super().__init__(f"Failed to decode item {item_id}: {message}", item_id=item_id)


class CacheReadError(HNScraperError):
    """A cache entry exists but could not be read back."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Failed to read cache entry {path}: {message}")


class CacheWriteError(HNScraperError):
    """A cache entry could not be written."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Failed to write cache entry {path}: {message}")


class OutputWriteError(HNScraperError):
    """Filtered comments could not be written to the destination."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Failed to write output to {path}: {message}")


class ConfigError(HNScraperError):
    """Invalid configuration or command-line input."""
