"""
Unit tests for the news desk and periodic index refresh.
"""
import asyncio
from unittest.mock import AsyncMock, Mock

from ecopulse.news import (
    IndexRefresher,
    MarketIndex,
    NewsCategory,
    NewsDesk,
    NewsFeed,
    Region,
)
from ecopulse.news.desk import (
    MSG_CONNECTION_FAILED,
    MSG_INSIGHT_FAILED,
    MSG_MISSING_API_KEY,
)
from ecopulse.reliability import RateLimiter, RemoteCallError


KOSPI = MarketIndex(name="KOSPI", value="2,650.31", change="+12.40", change_percent="+0.47%", trend="up")


def make_client(configured=True):
    client = Mock()
    client.configured = configured
    client.fetch_economic_news = AsyncMock(return_value=NewsFeed())
    client.fetch_market_indices = AsyncMock(return_value=[KOSPI])
    client.get_deep_insight = AsyncMock(return_value="report")
    return client


class TestLoadNews:
    """Test the sanitize -> rate limit -> fetch chain."""

    def test_success(self, fake_clock):
        client = make_client()
        desk = NewsDesk(client, RateLimiter(clock=fake_clock))

        result = asyncio.run(desk.load_news(Region.OVERSEAS, NewsCategory.TECH, "ai chips"))

        assert result.ok
        assert isinstance(result.feed, NewsFeed)
        client.fetch_economic_news.assert_awaited_once_with(Region.OVERSEAS, NewsCategory.TECH, "ai chips")

    def test_missing_api_key(self, fake_clock):
        client = make_client(configured=False)
        limiter = RateLimiter(clock=fake_clock)
        desk = NewsDesk(client, limiter)

        result = asyncio.run(desk.load_news())

        assert result.configuration_error
        assert result.error == MSG_MISSING_API_KEY
        client.fetch_economic_news.assert_not_awaited()
        # Key check happens before the limiter records anything
        assert limiter.last_request_time is None

    def test_rate_limited_second_request(self, fake_clock):
        client = make_client()
        desk = NewsDesk(client, RateLimiter(clock=fake_clock))

        asyncio.run(desk.load_news())
        fake_clock.advance(1.5)
        result = asyncio.run(desk.load_news())

        assert result.rate_limited
        assert result.retry_after == 4
        assert "4s" in result.error
        assert client.fetch_economic_news.await_count == 1

    def test_allowed_after_interval(self, fake_clock):
        client = make_client()
        desk = NewsDesk(client, RateLimiter(clock=fake_clock))

        asyncio.run(desk.load_news())
        fake_clock.advance(5)
        result = asyncio.run(desk.load_news())

        assert result.ok
        assert client.fetch_economic_news.await_count == 2

    def test_remote_failure_becomes_message(self, fake_clock):
        client = make_client()
        client.fetch_economic_news.side_effect = RemoteCallError("down", status=503)
        desk = NewsDesk(client, RateLimiter(clock=fake_clock))

        result = asyncio.run(desk.load_news())

        assert not result.ok
        assert not result.rate_limited
        assert result.error == MSG_CONNECTION_FAILED

    def test_default_limiter_created(self):
        desk = NewsDesk(make_client())
        assert isinstance(desk.rate_limiter, RateLimiter)


class TestMarketDataAndInsight:
    """Test index caching and insight fallback."""

    def test_market_data_cached(self):
        desk = NewsDesk(make_client())

        assert asyncio.run(desk.load_market_data()) == [KOSPI]
        assert desk.indices == [KOSPI]

    def test_market_data_failure_keeps_previous(self):
        client = make_client()
        desk = NewsDesk(client)
        asyncio.run(desk.load_market_data())

        client.fetch_market_indices.side_effect = RemoteCallError("down")
        assert asyncio.run(desk.load_market_data()) == [KOSPI]

    def test_market_data_not_rate_limited(self, fake_clock):
        client = make_client()
        limiter = RateLimiter(clock=fake_clock)
        desk = NewsDesk(client, limiter)
        limiter.can_request()

        asyncio.run(desk.load_market_data())

        client.fetch_market_indices.assert_awaited_once()

    def test_insight(self):
        client = make_client()
        desk = NewsDesk(client)

        assert asyncio.run(desk.show_insight("rates")) == "report"
        client.get_deep_insight.assert_awaited_once_with("rates")

    def test_insight_failure_fallback(self):
        client = make_client()
        client.get_deep_insight.side_effect = RemoteCallError("bad", status=400)

        assert asyncio.run(NewsDesk(client).show_insight("rates")) == MSG_INSIGHT_FAILED


class TestIndexRefresher:
    """Test periodic refresh scheduling."""

    def test_refreshes_until_stopped(self):
        client = make_client()
        desk = NewsDesk(client)

        async def main():
            refresher = IndexRefresher(desk, interval=0.01)
            refresher.start()
            assert refresher.running
            await asyncio.sleep(0.05)
            await refresher.stop()
            assert not refresher.running
            count = client.fetch_market_indices.await_count
            await asyncio.sleep(0.03)
            return count

        count = asyncio.run(main())
        assert count >= 2
        assert client.fetch_market_indices.await_count == count
        assert desk.indices == [KOSPI]

    def test_stop_lets_in_flight_refresh_finish(self):
        client = make_client()
        started = []
        finished = []

        async def slow_fetch():
            started.append(True)
            await asyncio.sleep(0.02)
            finished.append(True)
            return [KOSPI]

        client.fetch_market_indices = AsyncMock(side_effect=slow_fetch)
        desk = NewsDesk(client)

        async def main():
            refresher = IndexRefresher(desk, interval=60)
            refresher.start()
            await asyncio.sleep(0)
            await refresher.stop()

        asyncio.run(main())
        assert started == [True]
        assert finished == [True]
        assert desk.indices == [KOSPI]

    def test_stop_without_start(self):
        refresher = IndexRefresher(NewsDesk(make_client()), interval=1)
        asyncio.run(refresher.stop())
        assert not refresher.running
