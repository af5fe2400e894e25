"""Select and build the configured persistence backend."""

import logging
from typing import Optional

import httpx

from artfinder.config import Settings
from artfinder.exceptions import ConfigurationError
from artfinder.persistence.astra_store import AstraConfig, AstraRestStore
from artfinder.persistence.base import ResearchStore
from artfinder.persistence.memory_store import InMemoryStore
from artfinder.persistence.supabase_store import SupabaseConfig, SupabaseStore

logger = logging.getLogger(__name__)


async def create_store(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ResearchStore:
    """Build the backend named by ``settings.persistence_backend``.

    Args:
        settings: Application settings.
        transport: Optional ``httpx`` transport for the REST backend.

    Raises:
        ConfigurationError: If the backend is unknown or its credentials
            are missing.
    """
    backend = settings.persistence_backend
    logger.info("Using persistence backend: %s", backend)

    if backend == "supabase":
        return await SupabaseStore.create(
            SupabaseConfig(
                url=settings.supabase_url,
                key=settings.supabase_service_key,
                research_table=settings.research_table,
                analysis_table=settings.analysis_table,
            )
        )
    if backend == "astra":
        return AstraRestStore(
            AstraConfig(
                base_url=settings.astra_base_url,
                token=settings.astra_token,
                keyspace=settings.astra_keyspace,
                research_table=settings.research_table,
                analysis_table=settings.analysis_table,
            ),
            write_concurrency=settings.write_concurrency,
            timeout=settings.http_timeout,
            transport=transport,
        )
    if backend == "memory":
        return InMemoryStore()
    raise ConfigurationError(f"Unknown persistence backend '{backend}'")
