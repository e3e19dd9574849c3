"""JSON file cache of resolved threads, one file per thread."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from hn_scraper.errors import CacheReadError, CacheWriteError
from hn_scraper.models.comment import CommentRecord
from hn_scraper.models.mapping import record_from_dict, records_to_dicts
from hn_scraper.storage.data_sink import CommentCache

logger = logging.getLogger(__name__)


class JsonCacheStore(CommentCache):
    """Stores each thread's comments as ``{cache_dir}/{thread_id}.json``."""

    def __init__(self, cache_dir: str):
        """
        Initialize the cache with its root directory.

        Args:
            cache_dir: Directory holding the cache files; created if missing
        """
        self.cache_dir = Path(cache_dir).expanduser()
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        """Ensure the cache directory exists."""
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheWriteError(str(self.cache_dir), str(e)) from e

    def path_for(self, thread_id: int) -> Path:
        """Cache file path for a thread."""
        return self.cache_dir / f"{int(thread_id)}.json"

    def load(self, thread_id: int) -> Optional[List[CommentRecord]]:
        """
        Load the cached comments for a thread.

        Returns:
            List of comments, or None if the thread is not cached

        Raises:
            CacheReadError: If the entry exists but is unreadable or corrupt
        """
        path = self.path_for(thread_id)
        try:
            with open(path, "r", encoding="utf-8") as file:
                data = json.load(file)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            raise CacheReadError(str(path), str(e)) from e

        if not isinstance(data, list):
            raise CacheReadError(str(path), f"expected a JSON array, got {type(data).__name__}")

        try:
            comments = [record_from_dict(entry) for entry in data]
        except ValueError as e:
            raise CacheReadError(str(path), str(e)) from e

        logger.info(f"Loaded {len(comments)} cached comments for thread {thread_id} from {path}")
        return comments

    def store(self, thread_id: int, comments: List[CommentRecord]) -> None:
        """
        Write the comments for a thread.

        The file is written under a temporary name and renamed into place, so
        a reader never sees a partial entry.

        Raises:
            CacheWriteError: If the entry cannot be written
        """
        path = self.path_for(thread_id)
        self._ensure_directory()

        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.cache_dir,
                prefix=f".{int(thread_id)}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_path = tmp.name
                json.dump(records_to_dicts(comments), tmp, ensure_ascii=False)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise CacheWriteError(str(path), str(e)) from e

        logger.info(f"Cached {len(comments)} comments for thread {thread_id} in {path}")

    def list_thread_ids(self) -> List[int]:
        """IDs of all cached threads, ascending."""
        thread_ids = []
        for path in self.cache_dir.glob("*.json"):
            if path.stem.isdigit():
                thread_ids.append(int(path.stem))
        return sorted(thread_ids)

    def delete(self, thread_id: int) -> bool:
        """
        Remove the cache entry for a thread.

        Returns:
            True if an entry was removed
        """
        path = self.path_for(thread_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise CacheWriteError(str(path), str(e)) from e

        logger.info(f"Removed cache entry for thread {thread_id}")
        return True

    def clear(self) -> int:
        """Remove every cache entry and return how many were removed."""
        return sum(1 for thread_id in self.list_thread_ids() if self.delete(thread_id))
