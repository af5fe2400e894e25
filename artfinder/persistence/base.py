"""
Persistence gateway capability interface.

Backends are interchangeable and chosen at startup (see
``artfinder.persistence.factory.create_store``).  Every backend writes by
upsert keyed on ``id``: re-storing a record with the same id overwrites
it, so resubmitting a batch is safe.
"""

from typing import Iterable, List, Protocol, Sequence, runtime_checkable

from artfinder.models import AnalysisResult, ResearchItem


@runtime_checkable
class ResearchStore(Protocol):
    """Storage for research items and analysis results.

    Writes raise ``StoreError``; reads raise ``FetchError``.
    """

    async def store(self, items: Sequence[ResearchItem]) -> None:
        ...

    async def load_all(self) -> List[ResearchItem]:
        ...

    async def store_analysis(self, result: AnalysisResult) -> None:
        ...

    async def load_all_analyses(self) -> List[AnalysisResult]:
        ...


def dedupe_by_id(items: Iterable[ResearchItem]) -> List[ResearchItem]:
    """Collapse a batch to one item per id, keeping the last occurrence.

    Positions follow each id's first appearance.  Bulk upserts reject a
    batch that names the same key twice, and last-wins matches what
    sequential upserts would leave behind.
    """
    latest = {}
    for item in items:
        latest[item.id] = item
    return list(latest.values())
