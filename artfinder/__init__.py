"""ART Finder - automated research and trigger finder for data-driven marketing."""

__version__ = "0.1.0"

from artfinder.exceptions import (
    AdapterError,
    AnalysisError,
    ArtFinderError,
    ConfigurationError,
    EmptyResultError,
    FetchError,
    StoreError,
    ValidationError,
)
from artfinder.models import AnalysisResult, ResearchItem, ResearchReport, SearchRequest, Source

__all__ = [
    "ArtFinderError",
    "AdapterError",
    "AnalysisError",
    "ConfigurationError",
    "EmptyResultError",
    "FetchError",
    "StoreError",
    "ValidationError",
    "AnalysisResult",
    "ResearchItem",
    "ResearchReport",
    "SearchRequest",
    "Source",
]
