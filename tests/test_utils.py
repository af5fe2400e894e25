"""Tests for artfinder.utils."""

import asyncio
import re
from datetime import datetime, timedelta, timezone

import pytest

from artfinder.utils import (
    ensure_utc,
    from_epoch,
    gather_bounded,
    generate_id,
    to_iso,
    utc_now,
)


# ===========================================================================
# Time helpers
# ===========================================================================


def test_utc_now_is_aware():
    """utc_now returns a timezone-aware UTC datetime."""
    now = utc_now()
    assert now.tzinfo is not None
    assert now.utcoffset() == timedelta(0)


def test_generate_id_is_unique_uuid():
    first, second = generate_id(), generate_id()
    assert first != second
    assert re.fullmatch(r"[0-9a-f-]{36}", first)


def test_ensure_utc_naive_is_assumed_utc():
    naive = datetime(2025, 1, 1, 12, 0)
    assert ensure_utc(naive) == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_ensure_utc_converts_other_zones():
    plus_two = timezone(timedelta(hours=2))
    aware = datetime(2025, 1, 1, 14, 0, tzinfo=plus_two)
    assert ensure_utc(aware) == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_to_iso_millisecond_z_format(sample_utc_now):
    dt = sample_utc_now.replace(microsecond=123456)
    assert to_iso(dt) == "2025-06-15T12:00:00.123Z"


def test_from_epoch_accepts_numbers_and_strings():
    assert from_epoch(0) == "1970-01-01T00:00:00.000Z"
    assert from_epoch("1717236000") == "2024-06-01T10:00:00.000Z"
    assert from_epoch(1.5) == "1970-01-01T00:00:01.500Z"


# ===========================================================================
# gather_bounded
# ===========================================================================


@pytest.mark.asyncio
async def test_gather_bounded_preserves_order():
    async def value(i):
        await asyncio.sleep(0.001 * (5 - i))
        return i

    assert await gather_bounded((value(i) for i in range(5)), limit=2) == [0, 1, 2, 3, 4]


@pytest.mark.asyncio
async def test_gather_bounded_caps_concurrency():
    in_flight = 0
    peak = 0

    async def task():
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.005)
        in_flight -= 1

    await gather_bounded([task() for _ in range(10)], limit=3)
    assert peak == 3


@pytest.mark.asyncio
async def test_gather_bounded_raises_after_all_settle():
    finished = []

    async def ok(i):
        await asyncio.sleep(0.002)
        finished.append(i)

    async def boom():
        raise RuntimeError("write failed")

    with pytest.raises(RuntimeError, match="write failed"):
        await gather_bounded([ok(1), boom(), ok(2)], limit=4)
    assert sorted(finished) == [1, 2]


@pytest.mark.asyncio
async def test_gather_bounded_empty():
    assert await gather_bounded([], limit=1) == []


@pytest.mark.asyncio
async def test_gather_bounded_rejects_zero_limit():
    with pytest.raises(ValueError, match="limit must be >= 1"):
        await gather_bounded([], limit=0)
