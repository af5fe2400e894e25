"""
Astra DB (Stargate REST v2) persistence gateway.

Talks to ``{base_url}/api/rest/v2/keyspaces/{keyspace}/{table}`` with an
``X-Cassandra-Token`` header.  ``base_url`` may point at the hosted
database or at a local pass-through proxy that keeps the token off the
browser.

Writes use ``PUT .../{table}/{id}``, which Stargate treats as an upsert on
the primary key.  Items are written one request each, concurrently, capped
at ``write_concurrency`` in flight.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx

from artfinder.exceptions import ConfigurationError, FetchError, StoreError, ValidationError
from artfinder.models import AnalysisResult, ResearchItem
from artfinder.persistence.base import dedupe_by_id
from artfinder.utils import gather_bounded

logger = logging.getLogger(__name__)


@dataclass
class AstraConfig:
    """Astra REST connection settings.

    Attributes:
        base_url: Database (or proxy) origin, e.g.
            ``https://<db-id>-<region>.apps.astra.datastax.com``.
        token: Application token sent as ``X-Cassandra-Token``.
        keyspace: Keyspace holding both tables.
    """

    base_url: str
    token: str
    keyspace: str = "artfinder"
    research_table: str = "research_data"
    analysis_table: str = "analysis_results"

    def __post_init__(self) -> None:
        if not self.base_url or not self.token:
            raise ConfigurationError("ASTRA_BASE_URL and ASTRA_TOKEN must be set")
        self.base_url = self.base_url.rstrip("/")

    def table_url(self, table: str) -> str:
        return f"{self.base_url}/api/rest/v2/keyspaces/{self.keyspace}/{table}"


class AstraRestStore:
    """Persistence gateway over the Astra REST API.

    Args:
        config: Connection settings.
        write_concurrency: Maximum concurrent per-item writes.
        page_size: Rows requested per read page; reads follow
            ``pageState`` until the table is exhausted.
        timeout: Per-request timeout in seconds.
        transport: Optional ``httpx`` transport for tests.
    """

    def __init__(
        self,
        config: AstraConfig,
        write_concurrency: int = 8,
        page_size: int = 100,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.write_concurrency = write_concurrency
        self.page_size = page_size
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "X-Cassandra-Token": self.config.token,
                "Accept": "application/json",
            },
        )

    # -----------------------------------------------------------------
    # RESEARCH DATA
    # -----------------------------------------------------------------

    async def store(self, items: Sequence[ResearchItem]) -> None:
        """Upsert each item by id.

        Raises:
            StoreError: On the first failed write (after all in-flight
                writes have settled).
        """
        if not items:
            return
        batch = dedupe_by_id(items)
        table = self.config.research_table
        async with self._client() as client:
            await gather_bounded(
                (self._put(client, table, item.to_dict()) for item in batch),
                self.write_concurrency,
            )
        logger.info("Upserted %d research items via Astra REST", len(batch))

    async def load_all(self) -> List[ResearchItem]:
        """Read every stored research item.

        Raises:
            FetchError: On a failed or malformed read.
        """
        rows = await self._get_rows(self.config.research_table)
        try:
            return [ResearchItem.from_dict(row) for row in rows]
        except ValidationError as exc:
            raise FetchError("Malformed research row", detail=str(exc)) from exc

    # -----------------------------------------------------------------
    # ANALYSIS RESULTS
    # -----------------------------------------------------------------

    async def store_analysis(self, result: AnalysisResult) -> None:
        """Upsert one analysis result by id.

        Raises:
            StoreError: When the write fails.
        """
        async with self._client() as client:
            await self._put(client, self.config.analysis_table, result.to_dict())

    async def load_all_analyses(self) -> List[AnalysisResult]:
        """Read the full analysis history.

        Raises:
            FetchError: On a failed or malformed read.
        """
        rows = await self._get_rows(self.config.analysis_table)
        try:
            return [AnalysisResult.from_dict(row) for row in rows]
        except ValidationError as exc:
            raise FetchError("Malformed analysis row", detail=str(exc)) from exc

    # -----------------------------------------------------------------
    # HTTP HELPERS
    # -----------------------------------------------------------------

    async def _put(
        self, client: httpx.AsyncClient, table: str, row: Dict[str, Any]
    ) -> None:
        key = row["id"]
        columns = {k: v for k, v in row.items() if k != "id"}
        url = f"{self.config.table_url(table)}/{quote(str(key), safe='')}"
        try:
            response = await client.put(url, json=columns)
        except httpx.HTTPError as exc:
            raise StoreError(f"Failed to store row {key} in {table}", detail=str(exc)) from exc
        if response.status_code >= 400:
            raise StoreError(
                f"Failed to store row {key} in {table}",
                status=response.status_code,
                detail=response.text[:500],
            )

    async def _get_rows(self, table: str) -> List[Dict[str, Any]]:
        url = f"{self.config.table_url(table)}/rows"
        rows: List[Dict[str, Any]] = []
        params: Dict[str, Any] = {"page-size": self.page_size}
        async with self._client() as client:
            while True:
                body = await self._get_page(client, table, url, params)
                # Stargate wraps rows in a "data" envelope
                page = body.get("data") if isinstance(body, dict) else None
                if not isinstance(page, list):
                    raise FetchError(f"Unexpected response shape from {table}")
                rows.extend(page)
                page_state = body.get("pageState")
                if not page_state:
                    return rows
                params = {"page-size": self.page_size, "page-state": page_state}

    async def _get_page(
        self, client: httpx.AsyncClient, table: str, url: str, params: Dict[str, Any]
    ) -> Any:
        try:
            response = await client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise FetchError(f"Failed to fetch rows from {table}", detail=str(exc)) from exc
        if response.status_code >= 400:
            raise FetchError(
                f"Failed to fetch rows from {table}",
                status=response.status_code,
                detail=response.text[:500],
            )
        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(f"Invalid JSON from {table}") from exc
