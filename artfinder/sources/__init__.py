"""
Source adapters for ART Finder.

- YouTubeAdapter: YouTube Data API v3 video search
- RedditAdapter: Reddit search with application-only OAuth
- QuoraAdapter: permanent empty placeholder (no public API)

``build_adapters`` constructs the adapters for a set of sources from one
``Settings`` object; missing credentials fail at construction time.
"""

from typing import Dict, Iterable, Optional, Union

import httpx

from artfinder.config import Settings
from artfinder.models import Source
from artfinder.sources.base import BaseHttpAdapter, SourceAdapter
from artfinder.sources.quora import QuoraAdapter
from artfinder.sources.reddit import RedditAdapter
from artfinder.sources.youtube import YouTubeAdapter


def build_adapters(
    settings: Settings,
    sources: Optional[Iterable[Union[Source, str]]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[Source, SourceAdapter]:
    """Build adapters for *sources* (all sources when ``None``).

    Raises:
        ConfigurationError: If a selected source lacks its credentials.
        ValidationError: If a source name is unknown.
    """
    wanted = [Source.parse(s) for s in sources] if sources is not None else list(Source)

    adapters: Dict[Source, SourceAdapter] = {}
    for source in wanted:
        if source in adapters:
            continue
        if source is Source.YOUTUBE:
            adapters[source] = YouTubeAdapter(
                api_key=settings.youtube_api_key,
                max_results=settings.youtube_max_results,
                timeout=settings.http_timeout,
                transport=transport,
            )
        elif source is Source.REDDIT:
            adapters[source] = RedditAdapter(
                client_id=settings.reddit_client_id,
                client_secret=settings.reddit_client_secret,
                user_agent=settings.reddit_user_agent,
                limit=settings.reddit_limit,
                timeout=settings.http_timeout,
                transport=transport,
            )
        elif source is Source.QUORA:
            adapters[source] = QuoraAdapter()
    return adapters


__all__ = [
    "SourceAdapter",
    "BaseHttpAdapter",
    "YouTubeAdapter",
    "RedditAdapter",
    "QuoraAdapter",
    "build_adapters",
]
