"""
Common contract for source adapters.

Every adapter exposes ``source`` and ``async fetch(topic)``.  ``fetch`` never
raises: upstream failures (transport errors, non-2xx statuses, malformed
bodies) are converted to ``AdapterError``, logged, and reported to the
caller as an empty list, so one failing source never aborts aggregation.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

import httpx

from artfinder.exceptions import AdapterError
from artfinder.models import ResearchItem, Source

logger = logging.getLogger(__name__)


@runtime_checkable
class SourceAdapter(Protocol):
    """Anything that can turn a topic into research items for one source."""

    source: Source

    async def fetch(self, topic: str) -> List[ResearchItem]:
        ...


class BaseHttpAdapter:
    """Shared plumbing for adapters that talk to an HTTP search API.

    Subclasses set ``source`` and implement ``_fetch``; they may raise
    anything from it.  ``fetch`` is the never-raise boundary.

    Args:
        timeout: Per-request timeout in seconds.
        transport: Optional ``httpx`` transport (tests pass
            ``httpx.MockTransport``).
    """

    source: Source

    def __init__(
        self,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self._transport = transport

    def _client(self, **kwargs: Any) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport, **kwargs
        )

    async def fetch(self, topic: str) -> List[ResearchItem]:
        """Fetch items for *topic*; returns ``[]`` on any failure."""
        try:
            items = await self._fetch(topic)
        except AdapterError as exc:
            logger.warning("%s adapter failed: %s", self.source.value, exc)
            return []
        except Exception as exc:
            wrapped = AdapterError(self.source.value, f"{type(exc).__name__}: {exc}")
            logger.warning(
                "%s adapter failed: %s", self.source.value, wrapped, exc_info=True
            )
            return []

        logger.info(
            "%s adapter: topic=%r, items=%d", self.source.value, topic, len(items)
        )
        return items

    async def _fetch(self, topic: str) -> List[ResearchItem]:
        raise NotImplementedError

    def _json(self, response: httpx.Response, what: str) -> Dict[str, Any]:
        """Check status and decode a JSON object body, or raise ``AdapterError``."""
        if response.status_code >= 400:
            raise AdapterError(
                self.source.value,
                f"{what} failed with status {response.status_code}: {response.text[:200]}",
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise AdapterError(self.source.value, f"{what} returned invalid JSON") from exc
        if not isinstance(body, dict):
            raise AdapterError(self.source.value, f"{what} returned a non-object body")
        return body
