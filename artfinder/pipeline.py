"""
Research pipeline -- one request from topic to stored analysis.

Stages (each timed by ``PipelineRunLogger``):

1. ``aggregate`` -- fan out to the selected sources
2. ``store``     -- upsert the items
3. ``load``      -- read back every stored item
4. ``analyze``   -- chat completion over the stored items
5. ``record``    -- persist the analysis and read back the history

Any stage failure marks the run ``failed`` and re-raises; nothing is
retried and there is no partial-success report.
"""

import logging
from typing import Optional

import httpx

from artfinder.aggregator import Aggregator
from artfinder.analysis import AnalysisClient
from artfinder.config import Settings
from artfinder.logging import LogComponent, PipelineLogger, PipelineRunLogger
from artfinder.models import ResearchReport, SearchRequest
from artfinder.persistence import ResearchStore, create_store
from artfinder.sources import build_adapters
from artfinder.utils import generate_id

logger = logging.getLogger(__name__)


class ResearchPipeline:
    """Wire aggregator, store, and analysis client into one request flow.

    Run logs go to *run_logger* when given, else to the registered
    ``PipelineLogger`` (or an echo-only one when none is registered).
    """

    def __init__(
        self,
        aggregator: Aggregator,
        store: ResearchStore,
        analysis_client: AnalysisClient,
        run_logger: Optional[PipelineLogger] = None,
    ) -> None:
        self.aggregator = aggregator
        self.store = store
        self.analysis_client = analysis_client
        self.run_logger = run_logger

    async def run(self, request: SearchRequest) -> ResearchReport:
        """Process *request* end to end.

        Raises:
            EmptyResultError: No source returned items.
            StoreError, FetchError: Persistence failed.
            AnalysisError: The completion call failed.
        """
        run = PipelineRunLogger(
            run_id=generate_id(), topic=request.topic, logger=self.run_logger
        )
        try:
            async with run.stage("aggregate", LogComponent.AGGREGATOR) as stage:
                fetched = await self.aggregator.aggregate(request)
                stage.data["fetched"] = len(fetched)

            async with run.stage("store", LogComponent.PERSISTENCE):
                await self.store.store(fetched)

            async with run.stage("load", LogComponent.PERSISTENCE) as stage:
                items = await self.store.load_all()
                stage.data["stored"] = len(items)

            async with run.stage("analyze", LogComponent.ANALYSIS) as stage:
                latest = await self.analysis_client.complete(
                    items, request.brand_guidelines or ""
                )
                stage.data["analysis_id"] = latest.id

            async with run.stage("record", LogComponent.PERSISTENCE) as stage:
                analyses = await self.analysis_client.record(latest)
                stage.data["analyses"] = len(analyses)
        except Exception:
            await run.finish(status="failed")
            raise

        await run.finish()
        return ResearchReport(
            request=request,
            items=items,
            analyses=analyses,
            latest_analysis=latest,
        )


async def create_pipeline(
    settings: Settings,
    request: Optional[SearchRequest] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ResearchPipeline:
    """Build a pipeline from one ``Settings`` object.

    When *request* is given, only the adapters it selects are built, so
    credentials for unselected sources are not required.

    Raises:
        ConfigurationError: If a required credential is missing.
    """
    adapters = build_adapters(
        settings,
        sources=request.sources if request is not None else None,
        transport=transport,
    )
    store = await create_store(settings, transport=transport)
    analysis_client = AnalysisClient.from_settings(settings, store, transport=transport)
    logger.info(
        "Pipeline ready: sources=%s, backend=%s",
        [s.value for s in adapters],
        settings.persistence_backend,
    )
    return ResearchPipeline(Aggregator(adapters), store, analysis_client)
