"""In-process persistence gateway for offline runs and tests."""

import copy
from typing import Dict, List, Sequence

from artfinder.models import AnalysisResult, ResearchItem


class InMemoryStore:
    """Dict-backed store with the same upsert-by-id semantics as the
    hosted backends.  Reads return copies in first-insertion order."""

    def __init__(self) -> None:
        self._items: Dict[str, ResearchItem] = {}
        self._analyses: Dict[str, AnalysisResult] = {}

    async def store(self, items: Sequence[ResearchItem]) -> None:
        for item in items:
            self._items[item.id] = copy.copy(item)

    async def load_all(self) -> List[ResearchItem]:
        return [copy.copy(item) for item in self._items.values()]

    async def store_analysis(self, result: AnalysisResult) -> None:
        self._analyses[result.id] = result

    async def load_all_analyses(self) -> List[AnalysisResult]:
        return list(self._analyses.values())
