"""
Shared data types for the ART Finder pipeline.

Types
-----
- **Enums**: ``Source``
- **Persisted records**: ``ResearchItem`` (``research_data`` table),
  ``AnalysisResult`` (``analysis_results`` table)
- **Transient**: ``SearchRequest`` (one user interaction),
  ``ResearchReport`` (pipeline output handed to the dashboard)

Persisted records round-trip through ``to_dict()`` / ``from_dict()`` so that
every persistence backend writes and reads the same row shape.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from artfinder.exceptions import ValidationError


# =============================================================================
# ENUMS
# =============================================================================


class Source(Enum):
    """Data sources a research request can draw from."""

    YOUTUBE = "youtube"
    REDDIT = "reddit"
    QUORA = "quora"

    @classmethod
    def parse(cls, value: Union["Source", str]) -> "Source":
        """Coerce an enum member or a case-insensitive name to ``Source``.

        Raises:
            ValidationError: If *value* is not a known source.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValidationError(
            f"Unknown source {value!r}. Valid sources: {[s.value for s in cls]}"
        )


# =============================================================================
# PERSISTED RECORDS
# =============================================================================


@dataclass
class ResearchItem:
    """
    One normalized piece of content fetched from a source.

    ``metadata`` is stored as serialized JSON text; pass a mapping and it
    is serialized on construction.  ``content`` may be empty but never
    ``None``.
    """

    id: str
    source: Source
    content: str
    metadata: str = "{}"
    created_at: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValidationError("ResearchItem.id must be a non-empty string")
        self.source = Source.parse(self.source)
        if self.content is None:
            raise ValidationError("ResearchItem.content cannot be None")
        if not isinstance(self.content, str):
            raise ValidationError(
                f"ResearchItem.content must be a string, got {type(self.content).__name__}"
            )
        if isinstance(self.metadata, Mapping):
            self.metadata = json.dumps(dict(self.metadata), ensure_ascii=False)
        elif self.metadata is None:
            self.metadata = "{}"
        elif not isinstance(self.metadata, str):
            raise ValidationError("ResearchItem.metadata must be a string or mapping")
        if self.created_at is None:
            self.created_at = ""

    def metadata_dict(self) -> Dict[str, Any]:
        """Parse ``metadata`` back into a dict (``{}`` if blank or invalid)."""
        if not self.metadata or not self.metadata.strip():
            return {}
        try:
            parsed = json.loads(self.metadata)
        except ValueError:
            return {}
        return parsed if isinstance(parsed, dict) else {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a row dict for persistence and prompt building."""
        return {
            "id": self.id,
            "source": self.source.value,
            "content": self.content,
            "metadata": self.metadata,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "ResearchItem":
        """Build from a stored row.

        Raises:
            ValidationError: If required keys are missing or invalid.
        """
        try:
            return cls(
                id=str(row["id"]),
                source=row["source"],
                content=row.get("content") if row.get("content") is not None else "",
                metadata=row.get("metadata") or "{}",
                created_at=row.get("created_at") or "",
            )
        except KeyError as exc:
            raise ValidationError(f"ResearchItem row missing key {exc}") from exc


@dataclass(frozen=True)
class AnalysisResult:
    """LLM-generated analysis.  Immutable once created."""

    id: str
    raw_analysis: str
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a row dict for persistence."""
        return {
            "id": self.id,
            "raw_analysis": self.raw_analysis,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "AnalysisResult":
        """Build from a stored row.

        Raises:
            ValidationError: If required keys are missing.
        """
        try:
            return cls(
                id=str(row["id"]),
                raw_analysis=row.get("raw_analysis") or "",
                timestamp=row.get("timestamp") or "",
            )
        except KeyError as exc:
            raise ValidationError(f"AnalysisResult row missing key {exc}") from exc


# =============================================================================
# TRANSIENT TYPES
# =============================================================================


def _dedupe_sources(sources: Iterable[Union[Source, str]]) -> Tuple[Source, ...]:
    seen: List[Source] = []
    for value in sources:
        parsed = Source.parse(value)
        if parsed not in seen:
            seen.append(parsed)
    return tuple(seen)


@dataclass
class SearchRequest:
    """
    One research request from the presentation layer.

    ``sources`` is coerced to a tuple of ``Source`` with duplicates removed
    (first occurrence wins, so the caller's order is kept).
    """

    topic: str
    sources: Tuple[Source, ...] = field(default_factory=lambda: tuple(Source))
    brand_guidelines: Optional[str] = ""

    def __post_init__(self) -> None:
        if not isinstance(self.topic, str) or not self.topic.strip():
            raise ValidationError("topic cannot be empty")
        self.topic = self.topic.strip()
        if isinstance(self.sources, (str, Source)):
            self.sources = (self.sources,)
        self.sources = _dedupe_sources(self.sources)
        if not self.sources:
            raise ValidationError("at least one source must be selected")
        if self.brand_guidelines is None:
            self.brand_guidelines = ""


@dataclass
class ResearchReport:
    """Everything one pipeline run produced, ready for display.

    Attributes:
        request: The request that was processed.
        items: All stored research items, as read back from the store.
        analyses: The full stored analysis history (not only this run's).
        latest_analysis: The analysis record created by this run.
    """

    request: SearchRequest
    items: List[ResearchItem]
    analyses: List[AnalysisResult]
    latest_analysis: Optional[AnalysisResult] = None

    def source_counts(self) -> Dict[str, int]:
        """Number of items per source, in ``Source`` declaration order."""
        counts = {source.value: 0 for source in Source}
        for item in self.items:
            counts[item.source.value] += 1
        return counts


__all__ = [
    "Source",
    "ResearchItem",
    "AnalysisResult",
    "SearchRequest",
    "ResearchReport",
]
