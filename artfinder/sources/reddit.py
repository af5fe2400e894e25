"""
Async Reddit search adapter (application-only OAuth).

Each ``fetch`` performs the client-credentials exchange and then one
search call.  The access token is deliberately not cached: a fresh one is
requested on every invocation.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from artfinder.exceptions import AdapterError, ConfigurationError
from artfinder.models import ResearchItem, Source
from artfinder.sources.base import BaseHttpAdapter
from artfinder.utils import from_epoch

logger = logging.getLogger(__name__)


class RedditAdapter(BaseHttpAdapter):
    """Reddit ``/r/all`` search.

    Args:
        client_id: Reddit app client id (required).
        client_secret: Reddit app client secret (required).
        user_agent: ``User-Agent`` header; Reddit rejects blank agents.
        limit: ``limit`` query parameter.
        timeout: Per-request timeout in seconds.
        transport: Optional ``httpx`` transport for tests.

    Raises:
        ConfigurationError: If the client id or secret is empty.
    """

    source = Source.REDDIT
    TOKEN_URL: str = "https://www.reddit.com/api/v1/access_token"
    SEARCH_URL: str = "https://oauth.reddit.com/r/all/search"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        user_agent: str = "artfinder/1.0",
        limit: int = 25,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not client_id or not client_secret:
            raise ConfigurationError(
                "REDDIT_CLIENT_ID and REDDIT_CLIENT_SECRET must be set to use the Reddit source"
            )
        super().__init__(timeout=timeout, transport=transport)
        self.client_id = client_id
        self.client_secret = client_secret
        self.user_agent = user_agent
        self.limit = limit

    async def _fetch(self, topic: str) -> List[ResearchItem]:
        async with self._client(headers={"User-Agent": self.user_agent}) as client:
            token = await self._access_token(client)
            response = await client.get(
                self.SEARCH_URL,
                params={"q": topic, "sort": "relevance", "limit": self.limit},
                headers={"Authorization": f"Bearer {token}"},
            )
        body = self._json(response, "Reddit search")

        try:
            children = body["data"]["children"]
        except (KeyError, TypeError) as exc:
            raise AdapterError(self.source.value, "response has no data.children") from exc
        items = (self._to_item(child.get("data") or {}) for child in children)
        return [item for item in items if item]

    async def _access_token(self, client: httpx.AsyncClient) -> str:
        # httpx builds the Basic header from base64(client_id:client_secret)
        response = await client.post(
            self.TOKEN_URL,
            data={"grant_type": "client_credentials"},
            auth=(self.client_id, self.client_secret),
        )
        body = self._json(response, "Reddit token exchange")
        token = body.get("access_token")
        if not token:
            raise AdapterError(
                self.source.value,
                f"token exchange returned no access_token: {body.get('error', 'unknown error')}",
            )
        return token

    def _to_item(self, post: Dict[str, Any]) -> Optional[ResearchItem]:
        post_id = post.get("id")
        if not post_id:
            logger.warning("Skipping Reddit post without id: %s", post.get("permalink"))
            return None
        created = post.get("created_utc")
        try:
            created_at = from_epoch(created) if created is not None else ""
        except (TypeError, ValueError, OverflowError, OSError):
            logger.warning("Skipping Reddit post %s with bad created_utc %r", post_id, created)
            return None
        return ResearchItem(
            id=str(post_id),
            source=self.source,
            content=post.get("selftext") or post.get("title") or "",
            metadata={
                "title": post.get("title"),
                "subreddit": post.get("subreddit"),
                "score": post.get("score"),
                "url": f"https://reddit.com{post.get('permalink', '')}",
            },
            created_at=created_at,
        )
