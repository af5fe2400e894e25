"""
Async YouTube Data API v3 search adapter.

Runs a keyword video search and maps each hit to a ``ResearchItem``:
video id, description as content, and publish time.  Title, thumbnails
and channel go into the metadata JSON.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from artfinder.exceptions import AdapterError, ConfigurationError
from artfinder.models import ResearchItem, Source
from artfinder.sources.base import BaseHttpAdapter

logger = logging.getLogger(__name__)


class YouTubeAdapter(BaseHttpAdapter):
    """YouTube keyword search.

    Args:
        api_key: YouTube Data API key (required).
        max_results: ``maxResults`` query parameter.
        timeout: Per-request timeout in seconds.
        transport: Optional ``httpx`` transport for tests.

    Raises:
        ConfigurationError: If *api_key* is empty.
    """

    source = Source.YOUTUBE
    SEARCH_URL: str = "https://www.googleapis.com/youtube/v3/search"

    def __init__(
        self,
        api_key: str,
        max_results: int = 10,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("YOUTUBE_API_KEY must be set to use the YouTube source")
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = api_key
        self.max_results = max_results

    async def _fetch(self, topic: str) -> List[ResearchItem]:
        params = {
            "part": "snippet",
            "q": topic,
            "type": "video",
            "maxResults": self.max_results,
            "key": self.api_key,
        }
        async with self._client() as client:
            response = await client.get(self.SEARCH_URL, params=params)
        body = self._json(response, "YouTube search")

        entries = body.get("items")
        if not isinstance(entries, list):
            raise AdapterError(self.source.value, "response has no 'items' list")
        return [item for item in (self._to_item(e) for e in entries) if item]

    def _to_item(self, entry: Dict[str, Any]) -> Optional[ResearchItem]:
        video_id = (entry.get("id") or {}).get("videoId")
        if not video_id:
            # Channel or playlist hit
            logger.debug("Skipping YouTube result without videoId: %s", entry.get("id"))
            return None
        snippet = entry.get("snippet") or {}
        return ResearchItem(
            id=video_id,
            source=self.source,
            content=snippet.get("description") or "",
            metadata={
                "title": snippet.get("title"),
                "thumbnails": snippet.get("thumbnails"),
                "channelTitle": snippet.get("channelTitle"),
            },
            created_at=snippet.get("publishedAt") or "",
        )
