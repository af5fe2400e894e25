"""Structured log records for pipeline runs."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class LogLevel(Enum):
    """Severity, numerically equal to the stdlib ``logging`` level."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @property
    def name_str(self) -> str:
        return self.name.lower()


class LogComponent(Enum):
    """Pipeline parts that emit structured records."""

    PIPELINE = "pipeline"
    AGGREGATOR = "aggregator"
    PERSISTENCE = "persistence"
    ANALYSIS = "analysis"


@dataclass
class LogEntry:
    """One structured event, tagged with the run it belongs to.

    ``error`` holds ``"<ExceptionType>: <message>"`` when the event records
    a failure.
    """

    timestamp: datetime
    level: LogLevel
    component: LogComponent
    message: str
    run_id: Optional[str] = None
    topic: Optional[str] = None
    stage: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    duration_ms: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.name_str,
            "component": self.component.value,
            "run_id": self.run_id,
            "topic": self.topic,
            "stage": self.stage,
            "message": self.message,
            "data": self.data,
            "error": self.error,
            "duration_ms": self.duration_ms,
        }

    def to_json(self) -> str:
        """One JSON line; non-serializable values fall back to ``str``."""
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def to_readable(self) -> str:
        """Console form, e.g. ``[aggregator/aggregate] Stage finished (42ms)``."""
        scope = self.component.value
        if self.stage:
            scope += f"/{self.stage}"
        text = f"[{scope}] {self.message}"
        if self.duration_ms is not None:
            text += f" ({self.duration_ms}ms)"
        if self.error:
            text += f" -- {self.error}"
        return text
