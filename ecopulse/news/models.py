"""
News data models

JSON uses camelCase field names (publishedAt, reliabilityScore,
changePercent); Python attributes are snake_case.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class NewsCategory(str, Enum):
    ALL = "ALL"
    KOREA = "KOREA"
    BUSINESS = "BUSINESS"
    STOCK = "STOCK"
    CRYPTO = "CRYPTO"
    TECH = "TECH"
    ENTERTAINMENT = "ENTERTAINMENT"
    HEALTH = "HEALTH"


class Region(str, Enum):
    DOMESTIC = "domestic"
    OVERSEAS = "overseas"

    @property
    def search_text(self) -> str:
        """Region phrase used inside search prompts"""
        return "South Korea" if self is Region.DOMESTIC else "Global/US"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GroundingSource(_CamelModel):
    """Web page the search grounding cited"""
    title: str
    uri: str


class NewsArticle(_CamelModel):
    id: str
    title: str
    summary: str
    url: str = "#"
    source: str
    published_at: str = ""
    category: NewsCategory = NewsCategory.ALL
    sentiment: Sentiment = Sentiment.NEUTRAL
    reliability_score: float = 0


class MarketIndex(_CamelModel):
    """
    Latest value of a market index or exchange rate

    Values are kept as display strings ("2,650.31", "+1.2%") since they come
    straight from search results.
    """
    name: str
    value: str
    change: str
    change_percent: str
    trend: Trend = Trend.NEUTRAL


class NewsFeed(_CamelModel):
    articles: List[NewsArticle] = Field(default_factory=list)
    sources: List[GroundingSource] = Field(default_factory=list)
