"""Hacker News item API client."""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from hn_scraper.config import Config
from hn_scraper.errors import DecodeError, TransportError
from hn_scraper.models.comment import CommentRecord, ThreadRecord
from hn_scraper.models.mapping import item_to_comment, item_to_thread

logger = logging.getLogger(__name__)


class HNClient:
    """Read-only client for the Hacker News ``/item/{id}.json`` endpoint."""

    def __init__(self, config: Config):
        """
        Initialize the client with configuration.

        Args:
            config: Application configuration with API base URL and timeouts
        """
        self.config = config
        self.base_url = config.api_base_url.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None

    async def initialize(self) -> aiohttp.ClientSession:
        """Create the shared HTTP session if needed and return it."""
        if not self._session:
            logger.debug(f"Opening HTTP session for {self.base_url}")
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": self.config.user_agent, "Accept": "application/json"},
                timeout=aiohttp.ClientTimeout(total=self.config.request_timeout_sec),
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session and release resources."""
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "HNClient":
        # The session opens on the first request, so cached runs never connect
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def item_url(self, item_id: int) -> str:
        """URL of a single item, with the ID formatted as a whole number."""
        return f"{self.base_url}/item/{int(item_id)}.json"

    async def fetch_item(self, item_id: int) -> Dict[str, Any]:
        """
        Fetch one item and decode it.

        Args:
            item_id: Hacker News item ID

        Returns:
            The decoded JSON object

        Raises:
            TransportError: On connection failure, timeout or non-2xx status
            DecodeError: If the body is not a JSON object
        """
        session = await self.initialize()
        url = self.item_url(item_id)

        try:
            async with session.get(url) as response:
                if not 200 <= response.status < 300:
                    raise TransportError(item_id, f"HTTP {response.status} from {url}", status=response.status)
                body = await response.read()
        except aiohttp.ClientError as e:
            raise TransportError(item_id, f"{type(e).__name__}: {e}") from e
        except asyncio.TimeoutError as e:
            raise TransportError(item_id, f"timed out after {self.config.request_timeout_sec}s") from e

        try:
            data = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise DecodeError(item_id, f"invalid JSON: {e}") from e

        if not isinstance(data, dict):
            # The API answers `null` for IDs that do not exist
            raise DecodeError(item_id, f"expected a JSON object, got {json.dumps(data)[:50]}")

        return data

    async def fetch_thread(self, thread_id: int) -> ThreadRecord:
        """Fetch the root item of a thread and return its direct child IDs."""
        payload = await self.fetch_item(thread_id)
        thread = item_to_thread(thread_id, payload)
        logger.debug(f"Thread {thread_id} has {len(thread['kids'])} direct comments")
        return thread

    async def fetch_comment(self, comment_id: int) -> CommentRecord:
        """Fetch a single comment with its text HTML-unescaped."""
        payload = await self.fetch_item(comment_id)
        return item_to_comment(comment_id, payload)
