"""
Shared utility functions used throughout ART Finder.

Provides:
    - utc_now(): Timezone-aware UTC datetime
    - generate_id(): UUID4 string generator (for analysis record keys)
    - ensure_utc(dt): Convert any datetime to timezone-aware UTC
    - to_iso(dt): ISO-8601 string with a ``Z`` suffix for UTC
    - from_epoch(seconds): ISO-8601 string from a Unix timestamp
    - gather_bounded(coros, limit): asyncio.gather with a concurrency cap
"""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Iterable, List, TypeVar

T = TypeVar("T")


# ===========================================================================
# TIMEZONE UTILITIES
# ===========================================================================


def utc_now() -> datetime:
    """
    Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime in UTC.
    """
    return datetime.now(timezone.utc)


def generate_id() -> str:
    """
    Generate a unique ID for records that have no source-provided key.

    Returns:
        A unique UUID4 string.
    """
    return str(uuid.uuid4())


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure a datetime is timezone-aware in UTC.

    Args:
        dt: Datetime to convert (naive or aware).

    Returns:
        Timezone-aware datetime in UTC.
    """
    if dt.tzinfo is None:
        # Assume naive datetime is UTC
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(dt: datetime) -> str:
    """Format *dt* as ISO-8601 UTC with millisecond precision and ``Z`` suffix."""
    dt = ensure_utc(dt)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def from_epoch(seconds: Any) -> str:
    """Convert a Unix timestamp (int, float or numeric string) to ISO-8601 UTC."""
    return to_iso(datetime.fromtimestamp(float(seconds), tz=timezone.utc))


# ===========================================================================
# BOUNDED CONCURRENCY
# ===========================================================================


async def gather_bounded(aws: Iterable[Awaitable[T]], limit: int) -> List[T]:
    """
    Await *aws* concurrently with at most *limit* in flight at once.

    Results are returned in input order.  Unlike ``asyncio.gather``, a
    failure does not propagate immediately: every awaitable runs to
    completion first, then the first exception in input order is raised.

    Args:
        aws: Awaitables (typically coroutines) to run.
        limit: Maximum concurrency; must be >= 1.

    Raises:
        ValueError: If *limit* is less than 1.
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    semaphore = asyncio.Semaphore(limit)

    async def _run(aw: Awaitable[T]) -> T:
        async with semaphore:
            return await aw

    results = await asyncio.gather(
        *(_run(aw) for aw in aws), return_exceptions=True
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results  # type: ignore[return-value]
