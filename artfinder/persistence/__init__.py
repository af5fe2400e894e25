"""
Persistence gateway for research items and analysis results.

- ResearchStore: capability interface every backend satisfies
- SupabaseStore: managed-database client, bulk upsert
- AstraRestStore: Astra/Stargate REST with a token header (direct or via proxy)
- InMemoryStore: process-local store for offline runs and tests
- create_store: pick a backend from Settings
"""

from artfinder.persistence.base import ResearchStore, dedupe_by_id
from artfinder.persistence.astra_store import AstraConfig, AstraRestStore
from artfinder.persistence.factory import create_store
from artfinder.persistence.memory_store import InMemoryStore
from artfinder.persistence.supabase_store import SupabaseConfig, SupabaseStore

__all__ = [
    "ResearchStore",
    "dedupe_by_id",
    "AstraConfig",
    "AstraRestStore",
    "InMemoryStore",
    "SupabaseConfig",
    "SupabaseStore",
    "create_store",
]
