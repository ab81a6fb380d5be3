"""
Shared fixtures: fake clock, recorded sleeps and fake Gemini responses.
"""
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from ecopulse.news import GeminiNewsClient
from ecopulse.reliability import RetryPolicy


class FakeClock:
    """Manually advanced time source (seconds)."""

    def __init__(self, start=10_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordedSleep:
    """Async sleep stand-in that records requested delays instead of waiting."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def make_response(payload=None, text=None, sources=()):
    """Build an object shaped like a Gemini GenerateContentResponse."""
    if text is None:
        text = json.dumps(payload)
    chunks = [
        SimpleNamespace(web=SimpleNamespace(title=title, uri=uri))
        for title, uri in sources
    ]
    candidate = SimpleNamespace(grounding_metadata=SimpleNamespace(grounding_chunks=chunks))
    return SimpleNamespace(text=text, candidates=[candidate])


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def recorded_sleep():
    return RecordedSleep()


@pytest.fixture
def generate_content():
    """Stands in for genai Client.aio.models.generate_content; set the result per test."""
    return AsyncMock()


@pytest.fixture
def genai_client(generate_content):
    fake = Mock()
    fake.aio.models.generate_content = generate_content
    return fake


@pytest.fixture
def client(genai_client, recorded_sleep):
    return GeminiNewsClient(
        api_key="test-key",
        news_model="news-model",
        insight_model="insight-model",
        language="Korean",
        retry_policy=RetryPolicy(sleep=recorded_sleep),
        genai_client=genai_client,
    )
