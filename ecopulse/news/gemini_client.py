"""
Gemini News Client - Search-grounded news, market indices and insight reports

Each call runs inside the retry policy. SDK errors are converted to
RemoteCallError so the policy can tell client errors from server errors.

Grounded calls cannot request JSON mode on Gemini 2.x, so the expected JSON
shape goes into the prompt and the payload is parsed out of the text.
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..config import config
from ..reliability import RemoteCallError, RetryPolicy, sanitize
from .models import (
    GroundingSource,
    MarketIndex,
    NewsArticle,
    NewsCategory,
    NewsFeed,
    Region,
)

logger = logging.getLogger(__name__)

SEARCH_TOOL = types.Tool(google_search=types.GoogleSearch())
DEFAULT_SOURCE_TITLE = "Source"

MARKET_INDICES_PROMPT = (
    "Get the very latest values for KOSPI, KOSDAQ, S&P 500, NASDAQ, and USD/KRW "
    "exchange rate. Return them in a strict JSON array."
)

MARKET_INDICES_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "indices": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "value": {"type": "string"},
                    "change": {"type": "string"},
                    "changePercent": {"type": "string"},
                    "trend": {"type": "string", "enum": ["up", "down", "neutral"]}
                },
                "required": ["name", "value", "change", "changePercent", "trend"]
            }
        }
    },
    "required": ["indices"]
}

NEWS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "articles": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "title": {"type": "string"},
                    "summary": {"type": "string"},
                    "source": {"type": "string"},
                    "sentiment": {"type": "string", "enum": ["positive", "negative", "neutral"]},
                    "reliabilityScore": {"type": "number"}
                },
                "required": ["id", "title", "summary", "source", "sentiment", "reliabilityScore"]
            }
        }
    },
    "required": ["articles"]
}

_FENCED_JSON = re.compile(r'```(?:json)?\s*(.*?)```', re.DOTALL)


def with_json_schema(prompt: str, schema: Dict[str, Any]) -> str:
    """Append the required response shape to a prompt"""
    return (
        f"{prompt}\n\nRespond with only a JSON object matching this JSON schema, "
        f"without commentary:\n{json.dumps(schema)}"
    )


def parse_json_payload(text: Optional[str]) -> Any:
    """
    Parse the JSON object out of a model reply

    Accepts bare JSON, a ```json fenced block, or JSON surrounded by prose.

    Raises:
        ValueError: If no JSON object can be decoded
    """
    if not text:
        raise ValueError("Empty model response")

    fenced = _FENCED_JSON.search(text)
    candidate = fenced.group(1) if fenced else text.strip()

    try:
        return json.loads(candidate)
    except ValueError:
        start, end = candidate.find('{'), candidate.rfind('}')
        if start == -1 or end <= start:
            raise
        return json.loads(candidate[start:end + 1])


def build_news_query(region: Region, category: NewsCategory, query: Optional[str] = None) -> str:
    """
    Build the search phrase for a news request

    A user query (sanitized) takes precedence over the category.
    """
    clean_query = sanitize(query) if query else ""
    if clean_query:
        return f"{region.search_text} market news about {clean_query}"
    return f"Latest important {category.value} news in {region.search_text}"


def extract_sources(response) -> List[GroundingSource]:
    """Collect web citations from the first candidate's grounding metadata"""
    candidates = getattr(response, 'candidates', None) or []
    if not candidates:
        return []

    metadata = getattr(candidates[0], 'grounding_metadata', None)
    chunks = getattr(metadata, 'grounding_chunks', None) or []

    sources = []
    for chunk in chunks:
        web = getattr(chunk, 'web', None)
        if not web:
            continue
        sources.append(GroundingSource(
            title=getattr(web, 'title', None) or DEFAULT_SOURCE_TITLE,
            uri=getattr(web, 'uri', None) or ""
        ))
    return sources


class GeminiNewsClient:
    """
    Gemini-backed remote query client

    Operations:
    - fetch_market_indices(): KOSPI, KOSDAQ, S&P 500, NASDAQ, USD/KRW
    - fetch_economic_news(region, category, query): grounded articles
    - get_deep_insight(topic): long-form market insight report
    """

    def __init__(self, api_key: Optional[str] = None,
                 news_model: Optional[str] = None,
                 insight_model: Optional[str] = None,
                 language: Optional[str] = None,
                 retry_policy: Optional[RetryPolicy] = None,
                 genai_client: Optional[Any] = None):
        """
        Args:
            api_key: Gemini API key (defaults to config.GEMINI_API_KEY)
            news_model: Model for news and indices (defaults to config.NEWS_MODEL)
            insight_model: Model for insight reports (defaults to config.INSIGHT_MODEL)
            language: Output language for articles and reports
            retry_policy: Backoff policy wrapping every call
            genai_client: google-genai Client (built from api_key when None)
        """
        self.api_key = api_key or config.GEMINI_API_KEY
        self.news_model = news_model or config.NEWS_MODEL
        self.insight_model = insight_model or config.INSIGHT_MODEL
        self.language = language or config.OUTPUT_LANGUAGE
        self.retry_policy = retry_policy or RetryPolicy()

        # Client construction needs a key; unconfigured clients are never called
        if genai_client is None and self.api_key:
            genai_client = genai.Client(api_key=self.api_key)
        self.genai_client = genai_client

    @property
    def configured(self) -> bool:
        return bool(self.api_key) and self.genai_client is not None

    async def _generate(self, model_name: str, prompt: str):
        """Single Gemini call with Google Search grounding; SDK errors become RemoteCallError"""
        try:
            return await self.genai_client.aio.models.generate_content(
                model=model_name,
                contents=prompt,
                config=types.GenerateContentConfig(tools=[SEARCH_TOOL])
            )
        except genai_errors.APIError as e:
            status = int(e.code) if e.code else None
            raise RemoteCallError(f"Gemini call failed: {e.message}", status=status) from e

    async def fetch_market_indices(self) -> List[MarketIndex]:
        """
        Fetch latest market index values

        Returns:
            List of MarketIndex, [] if the response could not be parsed
        """
        prompt = with_json_schema(MARKET_INDICES_PROMPT, MARKET_INDICES_SCHEMA)

        async def operation():
            response = await self._generate(self.news_model, prompt)
            try:
                parsed = parse_json_payload(response.text)
                return [MarketIndex.model_validate(item) for item in parsed.get('indices', [])]
            except (ValueError, TypeError, AttributeError) as e:
                logger.error(f"Market data parse error: {e}")
                return []

        return await self.retry_policy.execute(operation)

    async def fetch_economic_news(self, region: Region, category: NewsCategory,
                                  query: Optional[str] = None) -> NewsFeed:
        """
        Search for recent economic news

        Args:
            region: Domestic (South Korea) or overseas (Global/US)
            category: News sector
            query: Optional free-text search (sanitized before use)

        Returns:
            NewsFeed with articles and the web sources that grounded them

        Raises:
            RemoteCallError / ValueError once retries are exhausted
        """
        final_query = build_news_query(region, category, query)
        prompt = with_json_schema(
            f'Search for the most recent news: "{final_query}". '
            f"Translate results to {self.language}. "
            "Provide a JSON array of articles with reliability scores.",
            NEWS_SCHEMA
        )

        async def operation():
            response = await self._generate(self.news_model, prompt)
            # Unparseable payloads raise and are retried like any transient failure
            parsed = parse_json_payload(response.text)
            sources = extract_sources(response)
            published_at = datetime.now(timezone.utc).isoformat()

            articles = []
            for index, raw in enumerate(parsed.get('articles') or []):
                article = dict(raw)
                article['publishedAt'] = published_at
                article['url'] = sources[index].uri if index < len(sources) and sources[index].uri else "#"
                article['category'] = category
                articles.append(NewsArticle.model_validate(article))

            return NewsFeed(articles=articles, sources=sources)

        logger.info(f"Fetching news: {final_query}")
        return await self.retry_policy.execute(operation)

    async def get_deep_insight(self, topic: str) -> str:
        """
        Generate a market insight report for a topic

        Args:
            topic: Free-text topic (sanitized before use)

        Returns:
            Report text
        """
        prompt = (
            f'Write a market insight report in {self.language} '
            f'on the topic: "{sanitize(topic)}".'
        )

        async def operation():
            response = await self._generate(self.insight_model, prompt)
            return response.text

        return await self.retry_policy.execute(operation)
