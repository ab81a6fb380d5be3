"""
News Module - Gemini search-grounded news, indices and insight

Operations:
- GeminiNewsClient: remote calls, each wrapped in the retry policy
- NewsDesk: sanitize -> rate limit -> fetch, with user-facing outcomes
- IndexRefresher: periodic market index refresh
"""

from .models import (
    GroundingSource,
    MarketIndex,
    NewsArticle,
    NewsCategory,
    NewsFeed,
    Region,
    Sentiment,
    Trend,
)
from .gemini_client import GeminiNewsClient
from .desk import DeskResult, IndexRefresher, NewsDesk

__all__ = [
    'GroundingSource',
    'MarketIndex',
    'NewsArticle',
    'NewsCategory',
    'NewsFeed',
    'Region',
    'Sentiment',
    'Trend',
    'GeminiNewsClient',
    'DeskResult',
    'IndexRefresher',
    'NewsDesk'
]
