"""
Async chat-completion client for marketing analysis of research items.

Uses ``httpx`` to call an OpenAI-compatible ``/chat/completions`` endpoint.
The item batch and brand guidelines are folded into one prompt; the first
returned message becomes an ``AnalysisResult``.  ``analyze`` additionally
persists that result and returns the store's full analysis history.

No retries: a failed completion fails the request with ``AnalysisError``.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from artfinder.config import Settings
from artfinder.exceptions import AnalysisError, ConfigurationError
from artfinder.models import AnalysisResult, ResearchItem
from artfinder.persistence.base import ResearchStore
from artfinder.utils import generate_id, to_iso, utc_now

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert marketing analyst. Analyze the provided research data "
    "and provide actionable insights."
)

USER_PROMPT_TEMPLATE = (
    "Analyze this research data and provide insights considering these brand "
    "guidelines: {guidelines}\n\nData: {data}"
)


class AnalysisClient:
    """Async wrapper around a chat-completions API.

    Args:
        api_key: Completion provider key (required).
        store: Persistence gateway used by :meth:`analyze`.
        model: Model name sent with each request.
        base_url: API root; ``/chat/completions`` is appended.
        max_items: Send at most this many items (``None`` sends all).
        timeout: Request timeout in seconds.
        transport: Optional ``httpx`` transport for tests.

    Raises:
        ConfigurationError: If *api_key* is empty.

    Usage::

        client = AnalysisClient.from_settings(settings, store)
        history = await client.analyze(items, "Playful, no jargon")
    """

    def __init__(
        self,
        api_key: str,
        store: ResearchStore,
        model: str = "gpt-4",
        base_url: str = "https://api.openai.com/v1",
        max_items: Optional[int] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY must be set to run analysis")
        self.api_key = api_key
        self.store = store
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.max_items = max_items
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: ResearchStore,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AnalysisClient":
        return cls(
            api_key=settings.openai_api_key,
            store=store,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            max_items=settings.analysis_max_items,
            timeout=settings.analysis_timeout,
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Prompt building
    # ------------------------------------------------------------------

    def build_messages(
        self, items: Sequence[ResearchItem], guidelines: str
    ) -> List[Dict[str, str]]:
        """Build the system and user messages for *items* and *guidelines*.

        An empty batch serializes as ``[]``; the request is still sent.
        """
        batch = list(items)
        if self.max_items is not None:
            batch = batch[: self.max_items]
        data = json.dumps([item.to_dict() for item in batch], ensure_ascii=False)
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": USER_PROMPT_TEMPLATE.format(
                    guidelines=guidelines or "", data=data
                ),
            },
        ]

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    async def complete(
        self, items: Sequence[ResearchItem], guidelines: str
    ) -> AnalysisResult:
        """Request one completion and wrap it as an ``AnalysisResult``.

        Raises:
            AnalysisError: On transport failure, a non-2xx response, or a
                response without ``choices[0].message.content``.
        """
        payload = {
            "model": self.model,
            "messages": self.build_messages(items, guidelines),
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                        "Accept": "application/json",
                    },
                    json=payload,
                )
        except httpx.HTTPError as exc:
            raise AnalysisError(f"Completion request failed: {exc}") from exc

        if response.status_code >= 400:
            raise AnalysisError(
                f"Completion API request failed: {self._error_message(response)}",
                status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise AnalysisError(
                "Completion API returned invalid JSON", status=response.status_code
            ) from exc

        content = self.extract_text(data)
        if content is None:
            raise AnalysisError(
                "Completion API returned no choices", status=response.status_code
            )

        logger.debug(
            "Completion finished: model=%s, items=%d, chars=%d",
            self.model,
            len(items),
            len(content),
        )
        return AnalysisResult(
            id=generate_id(),
            raw_analysis=content,
            timestamp=to_iso(utc_now()),
        )

    async def record(self, result: AnalysisResult) -> List[AnalysisResult]:
        """Persist *result* and return the full stored analysis history.

        Raises:
            StoreError: If the write fails.
            FetchError: If the read-back fails.
        """
        await self.store.store_analysis(result)
        return await self.store.load_all_analyses()

    async def analyze(
        self, items: Sequence[ResearchItem], guidelines: str
    ) -> List[AnalysisResult]:
        """Analyze *items*, persist the result, and return all stored analyses.

        The returned history includes earlier analyses; it is not limited to
        the record created by this call.
        """
        result = await self.complete(items, guidelines)
        return await self.record(result)

    # ------------------------------------------------------------------
    # Response helpers
    # ------------------------------------------------------------------

    @staticmethod
    def extract_text(response: Any) -> Optional[str]:
        """Return ``choices[0].message.content`` or ``None`` if absent."""
        try:
            content = response["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return None
        return content if isinstance(content, str) else None

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200] or f"status {response.status_code}"
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return error["message"]
        return "Unknown error"
