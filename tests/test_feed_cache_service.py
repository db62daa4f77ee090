"""
Unit tests for FeedCacheService (fresh hit, refresh, stale and empty fallback).
"""
import pytest

from app.exceptions import FetchFailed, NoDataAvailable, CriticalError
from app.models.feed import FetchState
from app.services.cache_service import cache_key
from app.services.feed_service import FeedDefinition, get_feed_definition
from tests.conftest import START, make_items


@pytest.fixture
def playbook():
    return get_feed_definition("playbook")


class TestFeedCacheService:
    """Test suite for FeedCacheService.get_posts."""

    @pytest.mark.asyncio
    async def test_cache_miss_fetches_and_stores(self, feed_service, fetcher, cache, playbook):
        result = await feed_service.get_posts(playbook)

        assert result.state == FetchState.REFRESHED
        assert result.cached is False
        assert result.last_fetch == START
        assert len(result.posts) == 14
        assert result.posts[0].title == "Post 1"
        fetcher.fetch_items.assert_awaited_once_with(playbook.url)
        assert cache.get(cache_key(playbook.url)).data == result.posts

    @pytest.mark.asyncio
    async def test_second_call_within_ttl_is_served_from_cache(self, feed_service, fetcher, clock, playbook):
        first = await feed_service.get_posts(playbook)
        clock.advance(599)
        second = await feed_service.get_posts(playbook)

        assert second.state == FetchState.FRESH_HIT
        assert second.cached is True
        assert second.posts == first.posts
        assert second.last_fetch == START
        assert fetcher.fetch_items.await_count == 1

    @pytest.mark.asyncio
    async def test_expired_entry_triggers_refresh(self, feed_service, fetcher, clock, playbook):
        await feed_service.get_posts(playbook)
        clock.advance(600)
        fetcher.fetch_items.return_value = make_items(3)

        result = await feed_service.get_posts(playbook)

        assert result.state == FetchState.REFRESHED
        assert len(result.posts) == 3
        assert result.last_fetch == clock.now()
        assert fetcher.fetch_items.await_count == 2

    @pytest.mark.asyncio
    async def test_fetch_failure_with_prior_entry_serves_stale_data(self, feed_service, fetcher, cache, clock, playbook):
        first = await feed_service.get_posts(playbook)
        entry = cache.get(cache_key(playbook.url))
        clock.advance(3600)
        fetcher.fetch_items.side_effect = FetchFailed(playbook.url, "timeout")

        result = await feed_service.get_posts(playbook)

        assert result.state == FetchState.STALE_FALLBACK
        assert result.posts == first.posts
        assert result.last_fetch == START
        assert cache.get(cache_key(playbook.url)) is entry

    @pytest.mark.asyncio
    async def test_stale_data_stays_available_during_failure_window(self, feed_service, fetcher, clock, playbook):
        first = await feed_service.get_posts(playbook)
        clock.advance(700)
        fetcher.fetch_items.side_effect = FetchFailed(playbook.url, "HTTP 502")

        again = await feed_service.get_posts(playbook)
        clock.advance(60)
        third = await feed_service.get_posts(playbook)

        assert again.state == third.state == FetchState.STALE_FALLBACK
        assert third.posts == first.posts
        # every request past expiry makes exactly one attempt
        assert fetcher.fetch_items.await_count == 3

    @pytest.mark.asyncio
    async def test_fetch_failure_without_cache_returns_empty(self, feed_service, fetcher, playbook):
        fetcher.fetch_items.side_effect = FetchFailed(playbook.url, "timeout")

        result = await feed_service.get_posts(playbook)

        assert result.state == FetchState.EMPTY_FALLBACK
        assert result.posts == ()
        assert result.last_fetch == START
        assert fetcher.fetch_items.await_count == 1

    @pytest.mark.asyncio
    async def test_max_items_truncates_before_caching(self, feed_service, cache):
        thoughts = get_feed_definition("thoughts")

        result = await feed_service.get_posts(thoughts)

        assert len(result.posts) == 10
        assert result.posts[0].description == "Summary of post 1"
        assert len(cache.get(cache_key(thoughts.url)).data) == 10

    @pytest.mark.asyncio
    async def test_feeds_are_cached_under_separate_keys(self, feed_service, cache, playbook):
        thoughts = get_feed_definition("thoughts")

        await feed_service.get_posts(playbook)
        await feed_service.get_posts(thoughts)

        assert len(cache.get(cache_key(playbook.url)).data) == 14
        assert len(cache.get(cache_key(thoughts.url)).data) == 10

    @pytest.mark.asyncio
    async def test_normalizer_bug_raises_critical_error(self, feed_service, cache):
        def broken(item, clock):
            raise KeyError("boom")

        feed = FeedDefinition(name="broken", url="https://example.com/feed", normalizer=broken)

        with pytest.raises(CriticalError) as exc_info:
            await feed_service.get_posts(feed)

        assert isinstance(exc_info.value.cause, KeyError)
        assert cache.get(cache_key(feed.url)) is None

    @pytest.mark.asyncio
    async def test_unexpected_fetcher_error_propagates(self, feed_service, fetcher, playbook):
        fetcher.fetch_items.side_effect = RuntimeError("unexpected")

        with pytest.raises(RuntimeError):
            await feed_service.get_posts(playbook)


class TestRequirePosts:
    """Test suite for FeedCacheService.require_posts."""

    @pytest.mark.asyncio
    async def test_raises_when_no_data(self, feed_service, fetcher, playbook):
        fetcher.fetch_items.side_effect = FetchFailed(playbook.url, "timeout")

        with pytest.raises(NoDataAvailable) as exc_info:
            await feed_service.require_posts(playbook)

        assert exc_info.value.feed_name == "playbook"

    @pytest.mark.asyncio
    async def test_returns_stale_data(self, feed_service, fetcher, clock, playbook):
        await feed_service.get_posts(playbook)
        clock.advance(601)
        fetcher.fetch_items.side_effect = FetchFailed(playbook.url, "timeout")

        result = await feed_service.require_posts(playbook)

        assert result.state == FetchState.STALE_FALLBACK
        assert len(result.posts) == 14
