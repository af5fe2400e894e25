"""
Aggregator -- fans a research request out to the selected source adapters.

Adapters run concurrently and the aggregation waits for all of them; a
slow source delays the result, a failing source contributes nothing.
Results are concatenated in the order the request lists its sources.
"""

import asyncio
import logging
from typing import Dict, List, Mapping

from artfinder.exceptions import ConfigurationError, EmptyResultError
from artfinder.models import ResearchItem, SearchRequest, Source
from artfinder.sources.base import SourceAdapter

logger = logging.getLogger(__name__)


class Aggregator:
    """Invoke exactly the adapters a request selects and combine their items.

    Args:
        adapters: Adapter per source.  Sources absent from the mapping
            cannot be requested.
    """

    def __init__(self, adapters: Mapping[Source, SourceAdapter]) -> None:
        self.adapters: Dict[Source, SourceAdapter] = dict(adapters)

    async def aggregate(self, request: SearchRequest) -> List[ResearchItem]:
        """Fetch *request.topic* from every selected source.

        Returns:
            Items from all selected sources, grouped by source in
            ``request.sources`` order.

        Raises:
            ConfigurationError: If a selected source has no adapter.
            EmptyResultError: If the selected sources returned no items.
        """
        missing = [s.value for s in request.sources if s not in self.adapters]
        if missing:
            raise ConfigurationError(
                f"No adapter configured for source(s): {missing}"
            )

        selected = [self.adapters[source] for source in request.sources]
        results = await asyncio.gather(
            *(adapter.fetch(request.topic) for adapter in selected)
        )

        counts = {
            source.value: len(items)
            for source, items in zip(request.sources, results)
        }
        logger.info("Aggregated topic=%r counts=%s", request.topic, counts)

        all_items: List[ResearchItem] = [
            item for items in results for item in items
        ]
        if not all_items:
            raise EmptyResultError()
        return all_items
