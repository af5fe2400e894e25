"""Stage timing for one research run.

Usage::

    run = PipelineRunLogger(run_id, topic="trail shoes")
    async with run.stage("aggregate", LogComponent.AGGREGATOR) as stage:
        items = await aggregator.aggregate(request)
        stage.data["fetched"] = len(items)
    summary = await run.finish()

A stage that raises is recorded as ``failed`` and the exception propagates.
Every entry carries this run's id and topic, even when several runs share
one logger concurrently.
"""

import time
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

from artfinder.logging.models import LogComponent, LogLevel
from artfinder.logging.pipeline_logger import PipelineLogger, current_logger


@dataclass
class StageRecord:
    name: str
    component: str
    status: str = "running"
    duration_ms: Optional[int] = None
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None


class PipelineRunLogger:
    """Binds a ``PipelineLogger`` to one run and times its stages.

    Args:
        run_id: Identifier attached to every entry of this run.
        topic: Research topic, attached alongside the run id.
        logger: Sink for the entries. Defaults to ``current_logger()``.
    """

    def __init__(
        self,
        run_id: str,
        topic: Optional[str] = None,
        logger: Optional[PipelineLogger] = None,
    ) -> None:
        self.run_id = run_id
        self.topic = topic
        self.logger = logger if logger is not None else current_logger()
        self._token = self.logger.bind(run_id, topic)
        self.stages: List[StageRecord] = []
        self._started = time.monotonic()

    @asynccontextmanager
    async def stage(
        self, name: str, component: LogComponent = LogComponent.PIPELINE
    ) -> AsyncIterator[StageRecord]:
        """Time the enclosed block as stage *name*.

        Yields the ``StageRecord``; put metrics into its ``data`` dict.
        """
        record = StageRecord(name=name, component=component.value)
        self.stages.append(record)
        await self._log(LogLevel.DEBUG, component, "Stage started", stage=name)
        started = time.monotonic()
        try:
            yield record
        except Exception as exc:
            record.status = "failed"
            record.error = f"{type(exc).__name__}: {exc}"
            record.duration_ms = _elapsed_ms(started)
            await self._log(
                LogLevel.ERROR,
                component,
                "Stage failed",
                stage=name,
                data=record.data,
                error=exc,
                duration_ms=record.duration_ms,
            )
            raise
        record.status = "success"
        record.duration_ms = _elapsed_ms(started)
        await self._log(
            LogLevel.INFO,
            component,
            "Stage finished",
            stage=name,
            data=record.data,
            duration_ms=record.duration_ms,
        )

    async def finish(self, status: str = "success") -> Dict[str, Any]:
        """Log the run summary, unbind the run context, and return the summary."""
        summary = {
            "run_id": self.run_id,
            "topic": self.topic,
            "status": status,
            "total_duration_ms": _elapsed_ms(self._started),
            "stages": [asdict(record) for record in self.stages],
        }
        level = LogLevel.INFO if status == "success" else LogLevel.ERROR
        await self._log(
            level,
            LogComponent.PIPELINE,
            f"Run {status}",
            data=summary,
            duration_ms=summary["total_duration_ms"],
        )
        self.logger.unbind(self._token)
        return summary

    async def _log(
        self, level: LogLevel, component: LogComponent, message: str, **kwargs: Any
    ) -> None:
        await self.logger.log(
            level, component, message, run_id=self.run_id, topic=self.topic, **kwargs
        )

    def summary_text(self) -> str:
        lines = [f"Run {self.run_id}" + (f" ({self.topic})" if self.topic else "")]
        for record in self.stages:
            marker = "ok" if record.status == "success" else record.status
            lines.append(f"  {record.name:<10} {marker:<8} {record.duration_ms or 0}ms")
        return "\n".join(lines)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
