"""Shared fixtures for the ART Finder test suite."""

import json
from datetime import datetime, timezone
from typing import Callable, Dict, List
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from artfinder.logging import init_logger
from artfinder.models import ResearchItem, Source


# ---------------------------------------------------------------------------
# Ensure we don't hit real APIs during tests
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _block_env_keys(monkeypatch):
    """Clear all credentials so tests never hit real services."""
    keys = [
        "YOUTUBE_API_KEY",
        "REDDIT_CLIENT_ID",
        "REDDIT_CLIENT_SECRET",
        "REDDIT_USER_AGENT",
        "OPENAI_API_KEY",
        "OPENAI_MODEL",
        "OPENAI_BASE_URL",
        "SUPABASE_URL",
        "SUPABASE_SERVICE_KEY",
        "ASTRA_BASE_URL",
        "ASTRA_TOKEN",
        "ASTRA_KEYSPACE",
        "ARTFINDER_BACKEND",
        "ARTFINDER_LOG_LEVEL",
        "ARTFINDER_LOG_DIR",
        "ARTFINDER_WRITE_CONCURRENCY",
        "ARTFINDER_HTTP_TIMEOUT",
        "ARTFINDER_ANALYSIS_MAX_ITEMS",
    ]
    for key in keys:
        monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# Structured logger writes into a per-test directory
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def pipeline_logger(tmp_path):
    """Register a fresh global PipelineLogger for every test."""
    return init_logger(log_dir=str(tmp_path / "logs"), echo=False)


# ---------------------------------------------------------------------------
# Common datetime fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def sample_utc_now():
    """A fixed UTC datetime for deterministic tests."""
    return datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Research items
# ---------------------------------------------------------------------------
@pytest.fixture
def sample_items() -> List[ResearchItem]:
    """Two YouTube items and one Reddit item."""
    return [
        ResearchItem(
            id="yt-1",
            source=Source.YOUTUBE,
            content="Best noise cancelling headphones of the year",
            metadata={"title": "Top 5 ANC", "channelTitle": "AudioLab"},
            created_at="2025-06-01T10:00:00Z",
        ),
        ResearchItem(
            id="yt-2",
            source=Source.YOUTUBE,
            content="Battery life is the real problem",
            metadata={"title": "ANC battery test"},
            created_at="2025-06-02T10:00:00Z",
        ),
        ResearchItem(
            id="rd-1",
            source=Source.REDDIT,
            content="My headphones hurt after an hour, any advice?",
            metadata={"subreddit": "headphones", "score": 42},
            created_at="2025-06-03T10:00:00.000Z",
        ),
    ]


# ---------------------------------------------------------------------------
# Fake upstream APIs
# ---------------------------------------------------------------------------
def _youtube_payload(*video_ids: str) -> Dict:
    """Build a YouTube search response body for *video_ids*."""
    return {
        "items": [
            {
                "id": {"kind": "youtube#video", "videoId": vid},
                "snippet": {
                    "title": f"Video {vid}",
                    "description": f"Description of {vid}",
                    "publishedAt": "2025-06-01T10:00:00Z",
                    "channelTitle": "Channel",
                    "thumbnails": {"default": {"url": f"https://i.ytimg.com/{vid}.jpg"}},
                },
            }
            for vid in video_ids
        ]
    }


def _reddit_payload(*post_ids: str) -> Dict:
    """Build a Reddit search response body for *post_ids*."""
    return {
        "data": {
            "children": [
                {
                    "data": {
                        "id": pid,
                        "title": f"Post {pid}",
                        "selftext": f"Body of {pid}",
                        "subreddit": "headphones",
                        "score": 10,
                        "permalink": f"/r/headphones/comments/{pid}/",
                        "created_utc": 1717236000,
                    }
                }
                for pid in post_ids
            ]
        }
    }


def _completion_payload(text: str) -> Dict:
    """Build a chat-completions response body."""
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


@pytest.fixture
def youtube_payload():
    return _youtube_payload


@pytest.fixture
def reddit_payload():
    return _reddit_payload


@pytest.fixture
def completion_payload():
    return _completion_payload


@pytest.fixture
def make_transport() -> Callable[..., httpx.MockTransport]:
    """Route requests by host to JSON responders, recording every request.

    Usage::

        transport = make_transport({"www.googleapis.com": (200, body)})
        transport.calls  # list of httpx.Request
    """

    def _make(routes: Dict[str, object]) -> httpx.MockTransport:
        calls: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            route = routes.get(request.url.host)
            if route is None:
                return httpx.Response(404, json={"error": "no route"})
            if callable(route):
                return route(request)
            status, body = route
            if isinstance(body, (dict, list)):
                return httpx.Response(status, content=json.dumps(body).encode(),
                                      headers={"Content-Type": "application/json"})
            return httpx.Response(status, text=str(body))

        transport = httpx.MockTransport(handler)
        transport.calls = calls
        return transport

    return _make


# ---------------------------------------------------------------------------
# Mock Supabase client
# ---------------------------------------------------------------------------
@pytest.fixture
def mock_supabase_client():
    """A mock Supabase async client backed by per-table row dicts.

    ``upsert`` merges rows by id; ``select`` returns them in insertion order.
    """
    client = MagicMock()
    client.tables = {}
    client.upserts = []

    def table(name):
        rows = client.tables.setdefault(name, {})
        table_mock = MagicMock()
        pending = {}

        def upsert(payload, on_conflict=None):
            pending["op"] = "upsert"
            pending["payload"] = payload if isinstance(payload, list) else [payload]
            pending["on_conflict"] = on_conflict
            client.upserts.append((name, pending["payload"], on_conflict))
            return table_mock

        def select(columns="*"):
            pending["op"] = "select"
            return table_mock

        async def execute():
            if pending.get("op") == "upsert":
                for row in pending["payload"]:
                    rows[row["id"]] = dict(row)
                return MagicMock(data=pending["payload"])
            return MagicMock(data=[dict(r) for r in rows.values()])

        table_mock.upsert.side_effect = upsert
        table_mock.select.side_effect = select
        table_mock.execute = AsyncMock(side_effect=execute)
        return table_mock

    client.table.side_effect = table
    return client
