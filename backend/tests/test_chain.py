"""Tests for the question answering pipeline."""

import httpx
import openai
import pytest

from app.core.errors import (
    AuthError,
    GenerationError,
    InsufficientContentError,
    NotFoundError,
    RateLimitedError,
    ValidationError,
)
from app.rag.chain import QueryOrchestrator, map_generation_error
from app.reddit.schemas import Comment, Post, SubredditSnapshot
from fakes import FakeGenerationClient, FakeRedditClient, rich_snapshot


@pytest.fixture
def reddit() -> FakeRedditClient:
    return FakeRedditClient(snapshot=rich_snapshot())


@pytest.fixture
def generator() -> FakeGenerationClient:
    return FakeGenerationClient()


@pytest.fixture
def orchestrator(reddit, generator, test_settings) -> QueryOrchestrator:
    return QueryOrchestrator(reddit, generator, test_settings)


@pytest.mark.asyncio
async def test_answer_end_to_end(orchestrator, reddit, generator) -> None:
    result = await orchestrator.answer("technology", "What are the biggest trends?")

    assert result.answer == "Synthesised answer."
    assert len(result.sources) == 1
    assert result.sources[0].url == "https://reddit.com/r/technology"
    assert result.sources[0].type == "post"
    assert result.tokens_used == 120
    assert result.confidence == 0.85
    assert result.model == "gpt-4o-mini"

    assert reddit.calls == [("technology", "24h", 25)]
    [call] = generator.calls
    assert call["model"] == "gpt-4o-mini"
    assert call["max_tokens"] == 4000
    assert call["temperature"] == 0.7
    assert "r/technology" in call["system_prompt"]
    assert "What are the biggest trends?" in call["user_prompt"]
    assert "POST (100 upvotes): Trend number 0" in call["user_prompt"]
    assert "===POSTS_END===" in call["user_prompt"]


@pytest.mark.asyncio
async def test_answer_result_is_serialisable(orchestrator) -> None:
    result = await orchestrator.answer("technology", "What are the biggest trends?", "gpt-3.5-turbo")

    data = result.model_dump(mode="json")
    assert data["model"] == "gpt-3.5-turbo"
    assert data["sources"][0]["title"] == "Recent discussions in r/technology"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "subreddit",
    ["", "has space", "dash-name", "r/technology", "emoji😀", "a" * 51, "semi;colon"],
)
async def test_invalid_subreddit_makes_no_calls(orchestrator, reddit, generator, subreddit) -> None:
    with pytest.raises(ValidationError):
        await orchestrator.answer(subreddit, "What are the biggest trends?")

    assert reddit.calls == []
    assert generator.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("question", ["", "    ", "abcd", "  ab  ", "x" * 501])
async def test_invalid_question_makes_no_calls(orchestrator, reddit, question) -> None:
    with pytest.raises(ValidationError):
        await orchestrator.answer("technology", question)

    assert reddit.calls == []


@pytest.mark.asyncio
async def test_question_length_is_measured_trimmed(orchestrator, reddit) -> None:
    await orchestrator.answer("a" * 50, "   abcde   ")
    await orchestrator.answer("Tech_2024", "x" * 500)

    assert len(reddit.calls) == 2


@pytest.mark.asyncio
async def test_unknown_model_is_rejected(orchestrator, reddit) -> None:
    with pytest.raises(ValidationError, match="Invalid model"):
        await orchestrator.answer("technology", "What are the biggest trends?", "gpt-9")

    assert reddit.calls == []


@pytest.mark.asyncio
async def test_no_posts_is_insufficient(test_settings, generator) -> None:
    empty = SubredditSnapshot(subreddit="quiet", fetched_at=1)
    orchestrator = QueryOrchestrator(FakeRedditClient(snapshot=empty), generator, test_settings)

    with pytest.raises(InsufficientContentError, match="No recent content"):
        await orchestrator.answer("quiet", "Anything happening today?")

    assert generator.calls == []


@pytest.mark.asyncio
async def test_sparse_content_is_insufficient(test_settings, generator) -> None:
    snapshot = SubredditSnapshot(
        subreddit="quiet",
        posts=[Post(id="a", title="Link post", selftext="", score=10)],
        comments=[Comment(id="c", body="short", score=3)],
        fetched_at=1,
    )
    orchestrator = QueryOrchestrator(FakeRedditClient(snapshot=snapshot), generator, test_settings)

    with pytest.raises(InsufficientContentError, match="Insufficient"):
        await orchestrator.answer("quiet", "Anything happening today?")

    assert generator.calls == []


@pytest.mark.asyncio
async def test_fetch_errors_propagate(test_settings, generator) -> None:
    reddit = FakeRedditClient(error=NotFoundError("Subreddit r/nope not found"))
    orchestrator = QueryOrchestrator(reddit, generator, test_settings)

    with pytest.raises(NotFoundError):
        await orchestrator.answer("nope", "Does this exist at all?")

    assert generator.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (Exception("You exceeded your current quota"), RateLimitedError),
        (Exception("Incorrect API key provided"), AuthError),
        (Exception("The server had an error"), GenerationError),
    ],
)
async def test_generation_errors_are_mapped(test_settings, reddit, error, expected) -> None:
    orchestrator = QueryOrchestrator(reddit, FakeGenerationClient(error=error), test_settings)

    with pytest.raises(expected):
        await orchestrator.answer("technology", "What are the biggest trends?")


def _openai_response(status: int) -> httpx.Response:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return httpx.Response(status, request=request)


def test_map_openai_rate_limit_error() -> None:
    error = openai.RateLimitError(
        "Rate limit reached",
        response=_openai_response(429),
        body={"code": "rate_limit_exceeded"},
    )

    mapped = map_generation_error(error)

    assert isinstance(mapped, RateLimitedError)
    assert mapped.status_code == 429
    assert mapped.retryable


def test_map_openai_authentication_error() -> None:
    error = openai.AuthenticationError(
        "Invalid credentials",
        response=_openai_response(401),
        body=None,
    )

    mapped = map_generation_error(error)

    assert isinstance(mapped, AuthError)
    assert mapped.status_code == 401


def test_map_insufficient_quota_code() -> None:
    error = Exception("request rejected")
    error.code = "insufficient_quota"  # type: ignore[attr-defined]

    assert isinstance(map_generation_error(error), RateLimitedError)


def test_map_unknown_error() -> None:
    mapped = map_generation_error(RuntimeError("boom"))

    assert isinstance(mapped, GenerationError)
    assert mapped.status_code == 500
    assert "boom" in mapped.message
