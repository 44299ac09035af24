"""Shared fixtures."""

import httpx
import pytest
import pytest_asyncio

from app.core.config import Settings
from app.reddit.auth import TokenCache
from app.reddit.client import RedditClient
from fakes import FakeReddit


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        reddit_client_id="client-id",
        reddit_client_secret="client-secret",
        reddit_user_agent="ask-reddit-ai-tests/0.1",
        openai_api_key="sk-test",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_reddit() -> FakeReddit:
    return FakeReddit()


@pytest_asyncio.fixture
async def http_client(fake_reddit: FakeReddit):
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_reddit.handler)) as client:
        yield client


@pytest.fixture
def token_cache(http_client: httpx.AsyncClient, test_settings: Settings, clock: FakeClock) -> TokenCache:
    return TokenCache(http_client, test_settings, clock=clock)


@pytest.fixture
def reddit_client(
    http_client: httpx.AsyncClient, token_cache: TokenCache, test_settings: Settings
) -> RedditClient:
    return RedditClient(http_client, token_cache, test_settings)
