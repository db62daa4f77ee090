"""
Pytest configuration and fixtures.
"""
import os

# Log to console only during tests; must be set before app.config is imported
os.environ["LOG_FILE"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from datetime import datetime, timezone
from unittest.mock import Mock, AsyncMock
from fastapi.testclient import TestClient

from app.main import create_app
from app.services.cache_service import FeedCache
from app.services.feed_service import FeedCacheService
from app.utils.clock import FrozenClock

START = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_items(count):
    """Build raw feed items as feedparser would return them."""
    return [
        {
            "title": f"Post {i}",
            "summary": f"Summary of post {i}",
            "link": f"https://example.substack.com/p/post-{i}",
            "published": "Mon, 06 Jan 2025 10:00:00 GMT",
        }
        for i in range(1, count + 1)
    ]


@pytest.fixture
def clock():
    """Frozen clock starting at a fixed instant."""
    return FrozenClock(START)


@pytest.fixture
def fetcher():
    """Mock feed fetcher returning 14 items."""
    mock = Mock()
    mock.fetch_items = AsyncMock(return_value=make_items(14))
    return mock


@pytest.fixture
def cache():
    return FeedCache(ttl_seconds=600)


@pytest.fixture
def feed_service(cache, fetcher, clock):
    return FeedCacheService(cache=cache, fetcher=fetcher, clock=clock)


@pytest.fixture
def client(feed_service):
    """Test client wired to the injected feed service."""
    return TestClient(create_app(feed_service=feed_service))
