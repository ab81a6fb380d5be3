"""
News Desk - Session-level orchestration of news, indices and insight

Call chain for a news request: sanitize -> rate-limit check -> fetch with
retry. Failures are turned into user-facing results here; the client below
only raises.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

from ..config import config
from ..reliability import RateLimiter
from .gemini_client import GeminiNewsClient
from .models import MarketIndex, NewsCategory, NewsFeed, Region

logger = logging.getLogger(__name__)

MSG_MISSING_API_KEY = "Configuration error: the Gemini API key is missing."
MSG_RATE_LIMITED = "Too many requests. Try again in {seconds}s."
MSG_CONNECTION_FAILED = "Could not reach the news service. Please try again."
MSG_INSIGHT_FAILED = "The analysis was interrupted. Please try again later."


@dataclass
class DeskResult:
    """Outcome of a news request as seen by the presentation layer"""
    feed: Optional[NewsFeed] = None
    error: Optional[str] = None
    rate_limited: bool = False
    retry_after: int = 0
    configuration_error: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


class NewsDesk:
    """
    One client session

    Owns the session's rate limiter (a single gate for news requests) and
    the last successfully fetched market indices.
    """

    def __init__(self, client: GeminiNewsClient, rate_limiter: Optional[RateLimiter] = None):
        self.client = client
        self.rate_limiter = rate_limiter or RateLimiter()
        self.indices: List[MarketIndex] = []

    async def load_news(self, region: Region = Region.DOMESTIC,
                        category: NewsCategory = NewsCategory.ALL,
                        query: Optional[str] = None) -> DeskResult:
        """
        Fetch news for a region/category, optionally narrowed by a search query

        Returns:
            DeskResult with feed on success, or an error message
        """
        if not self.client.configured:
            return DeskResult(error=MSG_MISSING_API_KEY, configuration_error=True)

        if not self.rate_limiter.can_request():
            seconds = self.rate_limiter.get_time_remaining()
            logger.info(f"News request throttled ({seconds}s remaining)")
            return DeskResult(
                error=MSG_RATE_LIMITED.format(seconds=seconds),
                rate_limited=True,
                retry_after=seconds
            )

        try:
            feed = await self.client.fetch_economic_news(region, category, query)
        except Exception:
            logger.exception("News fetch failed")
            return DeskResult(error=MSG_CONNECTION_FAILED)

        return DeskResult(feed=feed)

    async def load_market_data(self) -> List[MarketIndex]:
        """
        Refresh market indices

        Returns:
            Latest indices; the previous list if the fetch failed
        """
        try:
            self.indices = await self.client.fetch_market_indices()
        except Exception:
            logger.exception("Market data fetch failed")
        return self.indices

    async def show_insight(self, topic: str) -> str:
        """Deep insight report for a topic, or a fallback message on failure"""
        try:
            return await self.client.get_deep_insight(topic)
        except Exception:
            logger.exception(f"Insight generation failed for topic {topic!r}")
            return MSG_INSIGHT_FAILED


class IndexRefresher:
    """
    Periodic market index refresh

    stop() withdraws the schedule; a refresh already in flight is allowed
    to finish.
    """

    def __init__(self, desk: NewsDesk, interval: Optional[float] = None):
        self.desk = desk
        self.interval = config.INDEX_REFRESH_SECONDS if interval is None else interval
        self._task: Optional[asyncio.Task] = None
        self._stopped = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        """Schedule refreshes on the running event loop (first one immediately)"""
        if self.running:
            return
        self._stopped = asyncio.Event()
        self._task = asyncio.create_task(self._run())

    async def _run(self):
        while not self._stopped.is_set():
            await self.desk.load_market_data()
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass

    async def stop(self):
        """Stop scheduling and wait for the current refresh to complete"""
        if self._task is None:
            return
        self._stopped.set()
        await self._task
        self._task = None
