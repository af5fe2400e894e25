"""
Supabase-backed persistence gateway.

ALL Supabase calls for research data and analyses go through
``SupabaseStore``.  Items are written with one bulk upsert keyed by
``id``; reads are full-table ``select *`` with no pagination.

Usage::

    from artfinder.persistence.supabase_store import SupabaseConfig, SupabaseStore

    store = await SupabaseStore.create(SupabaseConfig(url=..., key=...))
    await store.store(items)
    rows = await store.load_all()
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from supabase import AsyncClient, create_async_client

from artfinder.exceptions import ConfigurationError, FetchError, StoreError, ValidationError
from artfinder.models import AnalysisResult, ResearchItem
from artfinder.persistence.base import dedupe_by_id

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================


@dataclass
class SupabaseConfig:
    """Supabase connection settings.

    Attributes:
        url: The Supabase project URL (``SUPABASE_URL``).
        key: The service-role key (``SUPABASE_SERVICE_KEY``).
        research_table: Table holding research items.
        analysis_table: Table holding analysis results.
    """

    url: str
    key: str
    research_table: str = "research_data"
    analysis_table: str = "analysis_results"

    def __post_init__(self) -> None:
        if not self.url or not self.key:
            raise ConfigurationError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY must be set"
            )


def _backend_error(exc: Exception) -> Dict[str, Any]:
    """Pull the status code and message off a postgrest/httpx error."""
    return {
        "status": getattr(exc, "code", None),
        "detail": getattr(exc, "message", None) or str(exc),
    }


# =============================================================================
# SUPABASE STORE
# =============================================================================


class SupabaseStore:
    """Async persistence gateway on top of the Supabase client.

    **Important:** Use the :meth:`create` factory method instead of
    ``__init__`` directly -- the async client requires an ``await`` during
    initialisation.
    """

    def __init__(self, client: AsyncClient, config: SupabaseConfig) -> None:
        """Private constructor.  Use :meth:`create` factory method."""
        self.client = client
        self.config = config

    @classmethod
    async def create(cls, config: SupabaseConfig) -> "SupabaseStore":
        """Create a connected :class:`SupabaseStore`."""
        client = await create_async_client(config.url, config.key)
        return cls(client, config)

    # -----------------------------------------------------------------
    # RESEARCH DATA
    # -----------------------------------------------------------------

    async def store(self, items: Sequence[ResearchItem]) -> None:
        """Upsert *items* into the research table in a single request.

        Raises:
            StoreError: When the upsert fails.
        """
        if not items:
            return
        rows = [item.to_dict() for item in dedupe_by_id(items)]
        try:
            await (
                self.client.table(self.config.research_table)
                .upsert(rows, on_conflict="id")
                .execute()
            )
        except Exception as exc:
            raise StoreError("Failed to store data", **_backend_error(exc)) from exc
        logger.info("Upserted %d research items", len(rows))

    async def load_all(self) -> List[ResearchItem]:
        """Read every stored research item.

        Raises:
            FetchError: When the select fails or a row is malformed.
        """
        rows = await self._select_all(self.config.research_table, "stored data")
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
            StoreError: When the upsert fails.
        """
        try:
            await (
                self.client.table(self.config.analysis_table)
                .upsert(result.to_dict(), on_conflict="id")
                .execute()
            )
        except Exception as exc:
            raise StoreError(
                "Failed to store analysis results", **_backend_error(exc)
            ) from exc

    async def load_all_analyses(self) -> List[AnalysisResult]:
        """Read the full analysis history.

        Raises:
            FetchError: When the select fails or a row is malformed.
        """
        rows = await self._select_all(self.config.analysis_table, "analysis results")
        try:
            return [AnalysisResult.from_dict(row) for row in rows]
        except ValidationError as exc:
            raise FetchError("Malformed analysis row", detail=str(exc)) from exc

    # -----------------------------------------------------------------
    # HELPERS
    # -----------------------------------------------------------------

    async def _select_all(self, table: str, what: str) -> List[Dict[str, Any]]:
        try:
            result = await self.client.table(table).select("*").execute()
        except Exception as exc:
            raise FetchError(f"Failed to fetch {what}", **_backend_error(exc)) from exc
        return result.data or []
