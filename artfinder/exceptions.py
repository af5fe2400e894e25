"""
Custom exception classes for ART Finder.

Source adapters are the only place where errors are swallowed: an
``AdapterError`` is logged and the adapter yields an empty result.  Every
other error fails the in-flight request and surfaces to the caller with
its message intact.  Nothing in the pipeline retries automatically.

Hierarchy:
    Exception
    +-- ArtFinderError (base for all pipeline errors)
    |   +-- AdapterError
    |   +-- EmptyResultError
    |   +-- PersistenceError
    |   |   +-- StoreError
    |   |   +-- FetchError
    |   +-- AnalysisError
    +-- ValidationError (ValueError)
    +-- ConfigurationError
"""

from typing import Any, Optional


# =============================================================================
# BASE EXCEPTION
# =============================================================================


class ArtFinderError(Exception):
    """Base exception for all pipeline errors."""

    pass


# =============================================================================
# CORE EXCEPTIONS
# =============================================================================


class ValidationError(ValueError):
    """Raised when input validation fails."""

    pass


class ConfigurationError(Exception):
    """Raised when a required setting or credential is missing or invalid."""

    pass


# =============================================================================
# SOURCE / AGGREGATION EXCEPTIONS
# =============================================================================


class AdapterError(ArtFinderError):
    """Raised inside a source adapter when its upstream call fails.

    Never escapes ``SourceAdapter.fetch``; the adapter logs it and returns
    an empty list.

    Attributes:
        source: Source identifier (e.g. ``"youtube"``).
    """

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"[{source}] {message}")


class EmptyResultError(ArtFinderError):
    """Raised when the selected sources produced no items at all."""

    def __init__(self, message: str = "No data fetched from selected sources."):
        super().__init__(message)


# =============================================================================
# PERSISTENCE EXCEPTIONS
# =============================================================================


class PersistenceError(ArtFinderError):
    """Base for persistence gateway failures.

    Attributes:
        status: HTTP status or backend error code, when known.
        detail: Backend-provided error body or message.
    """

    def __init__(
        self,
        message: str,
        status: Optional[Any] = None,
        detail: Optional[str] = None,
    ):
        self.status = status
        self.detail = detail
        text = message
        if status is not None:
            text += f" (status={status})"
        if detail:
            text += f": {detail}"
        super().__init__(text)


class StoreError(PersistenceError):
    """Raised when a write to the backing store fails."""

    pass


class FetchError(PersistenceError):
    """Raised when a read from the backing store fails."""

    pass


# =============================================================================
# ANALYSIS EXCEPTIONS
# =============================================================================


class AnalysisError(ArtFinderError):
    """Raised when the chat-completion call fails or returns an unusable shape.

    Attributes:
        status: HTTP status of the completion response, when known.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


# =============================================================================
# PUBLIC API
# =============================================================================

__all__ = [
    "ArtFinderError",
    "ValidationError",
    "ConfigurationError",
    "AdapterError",
    "EmptyResultError",
    "PersistenceError",
    "StoreError",
    "FetchError",
    "AnalysisError",
]
