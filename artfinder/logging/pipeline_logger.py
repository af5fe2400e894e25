"""
Run-scoped structured logger.

``PipelineLogger`` appends every ``LogEntry`` as a JSON line to
``<log_dir>/pipeline.jsonl`` (failures are duplicated into
``errors.jsonl``) using ``aiofiles``, mirrors it to the stdlib
``artfinder.pipeline`` logger, and keeps the latest entries in memory for
``recent()``.

The run context set by ``bind()`` lives in a ``ContextVar``, so runs
executing in separate asyncio tasks never see each other's run id.

One process-wide instance is registered with ``init_logger()`` and
fetched with ``get_logger()``.  ``current_logger()`` never fails: without a
registered instance it returns a file-less logger that only echoes to
stdlib logging.
"""

import logging
from collections import deque
from contextvars import ContextVar, Token
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional

import aiofiles

from artfinder.logging.models import LogComponent, LogEntry, LogLevel
from artfinder.utils import utc_now

_stdlib_logger = logging.getLogger("artfinder.pipeline")

RUN_LOG = "pipeline.jsonl"
ERROR_LOG = "errors.jsonl"

RunContext = Dict[str, Optional[str]]

_NO_RUN: RunContext = {"run_id": None, "topic": None}
_run_context: ContextVar[RunContext] = ContextVar("artfinder_run_context", default=_NO_RUN)


class PipelineLogger:
    """Structured log sink shared by every pipeline run.

    Args:
        log_dir: Directory for the JSON-lines files; created if missing.
            ``None`` disables file output.
        min_level: Entries below this level are dropped.
        echo: Mirror entries to the stdlib ``artfinder.pipeline`` logger.
        keep: Number of entries retained for ``recent()``.
    """

    def __init__(
        self,
        log_dir: Optional[str] = "logs",
        min_level: LogLevel = LogLevel.DEBUG,
        echo: bool = True,
        keep: int = 500,
    ) -> None:
        self.log_dir = Path(log_dir) if log_dir is not None else None
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
        self.min_level = min_level
        self.echo = echo
        self._recent: Deque[LogEntry] = deque(maxlen=keep)

    def bind(self, run_id: str, topic: Optional[str] = None) -> Token:
        """Tag entries logged from the current task with *run_id* and *topic*.

        Returns a token for ``unbind()``.
        """
        return _run_context.set({"run_id": run_id, "topic": topic})

    def unbind(self, token: Optional[Token] = None) -> None:
        if token is not None:
            _run_context.reset(token)
        else:
            _run_context.set(_NO_RUN)

    @property
    def run_id(self) -> Optional[str]:
        return _run_context.get()["run_id"]

    async def log(
        self,
        level: LogLevel,
        component: LogComponent,
        message: str,
        stage: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        error: Optional[BaseException] = None,
        duration_ms: Optional[int] = None,
        run_id: Optional[str] = None,
        topic: Optional[str] = None,
    ) -> Optional[LogEntry]:
        """Record one event; returns the entry, or ``None`` if filtered out.

        *run_id* and *topic* default to the bound run context.
        """
        if level.value < self.min_level.value:
            return None

        context = _run_context.get()
        entry = LogEntry(
            timestamp=utc_now(),
            level=level,
            component=component,
            message=message,
            run_id=run_id if run_id is not None else context["run_id"],
            topic=topic if topic is not None else context["topic"],
            stage=stage,
            data=dict(data or {}),
            error=f"{type(error).__name__}: {error}" if error is not None else None,
            duration_ms=duration_ms,
        )
        self._recent.append(entry)

        if self.log_dir is not None:
            line = entry.to_json() + "\n"
            targets = [RUN_LOG]
            if level.value >= LogLevel.ERROR.value:
                targets.append(ERROR_LOG)
            for name in targets:
                async with aiofiles.open(self.log_dir / name, "a", encoding="utf-8") as fh:
                    await fh.write(line)

        if self.echo:
            _stdlib_logger.log(level.value, entry.to_readable())
        return entry

    def recent(
        self,
        limit: int = 50,
        component: Optional[LogComponent] = None,
        run_id: Optional[str] = None,
        min_level: Optional[LogLevel] = None,
    ) -> List[LogEntry]:
        """Latest in-memory entries matching every given filter, oldest first."""
        matches = [
            entry
            for entry in self._recent
            if (component is None or entry.component is component)
            and (run_id is None or entry.run_id == run_id)
            and (min_level is None or entry.level.value >= min_level.value)
        ]
        return matches[-limit:]


_logger: Optional[PipelineLogger] = None
_fallback: Optional[PipelineLogger] = None


def init_logger(
    log_dir: Optional[str] = "logs",
    min_level: LogLevel = LogLevel.DEBUG,
    echo: bool = True,
) -> PipelineLogger:
    """Create and register the process-wide ``PipelineLogger``."""
    global _logger
    _logger = PipelineLogger(log_dir=log_dir, min_level=min_level, echo=echo)
    return _logger


def get_logger() -> PipelineLogger:
    """Return the registered ``PipelineLogger``.

    Raises:
        RuntimeError: If ``init_logger()`` has not been called.
    """
    if _logger is None:
        raise RuntimeError("Logger not initialized. Call init_logger() first.")
    return _logger


def current_logger() -> PipelineLogger:
    """Return the registered logger, or a file-less echo-only one."""
    global _fallback
    if _logger is not None:
        return _logger
    if _fallback is None:
        _fallback = PipelineLogger(log_dir=None)
    return _fallback
