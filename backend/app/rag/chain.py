"""Question answering over recent subreddit discussion."""

import logging
import re
from typing import Optional

import openai

from app.core.config import Settings
from app.core.errors import (
    AskRedditError,
    AuthError,
    GenerationError,
    InsufficientContentError,
    RateLimitedError,
    ValidationError,
)
from app.rag.generator import GenerationClient
from app.rag.normalizer import build_prompt_text
from app.rag.schemas import GenerationResult, Source
from app.reddit.client import RedditClient

logger = logging.getLogger(__name__)

SUBREDDIT_PATTERN = re.compile(r"^[A-Za-z0-9_]{1,50}$")
QUESTION_MIN_LENGTH = 5
QUESTION_MAX_LENGTH = 500

ANSWER_TIMEFRAME = "24h"
ANSWER_POST_LIMIT = 25


def validate_subreddit(subreddit: str) -> str:
    """Check a subreddit name and return it unchanged.

    Raises:
        ValidationError: If the name is empty, too long or has invalid characters
    """
    if not subreddit:
        raise ValidationError("Subreddit name is required")
    if len(subreddit) > 50:
        raise ValidationError("Subreddit name is too long")
    if not SUBREDDIT_PATTERN.match(subreddit):
        raise ValidationError(
            "Subreddit name can only contain letters, numbers, and underscores"
        )
    return subreddit


def validate_question(question: str) -> str:
    """Check a question and return it trimmed.

    Raises:
        ValidationError: If the trimmed question is empty, too short or too long
    """
    trimmed = (question or "").strip()
    if not trimmed:
        raise ValidationError("Question is required")
    if len(trimmed) < QUESTION_MIN_LENGTH:
        raise ValidationError("Please enter a question with at least 5 characters.")
    if len(trimmed) > QUESTION_MAX_LENGTH:
        raise ValidationError("Question is too long. Please keep it under 500 characters.")
    return trimmed


def create_system_prompt(subreddit: str) -> str:
    """Create the instructions sent ahead of every question."""
    return f"""You are an AI assistant that analyzes Reddit discussions and provides comprehensive, well-structured answers to user questions.

Your task is to:
1. Analyze the provided Reddit posts and comments from r/{subreddit}
2. Synthesize the information to answer the user's question
3. Provide a balanced, informative response based on the community discussions
4. Include relevant insights, trends, and perspectives from the Reddit content
5. Be objective and acknowledge different viewpoints when they exist

Guidelines:
- Focus on factual information and community consensus
- If there are conflicting opinions, present multiple viewpoints
- Don't make assumptions or add facts beyond what's discussed in the Reddit content
- If the Reddit content doesn't adequately address the question, say so explicitly
- Keep your response structured and easy to read, with clear paragraphs"""


def create_user_prompt(question: str, content: str, subreddit: str) -> str:
    return f"""Question: {question}

Reddit Content from r/{subreddit}:
{content}

Please provide a comprehensive answer based on the Reddit discussions above."""


def map_generation_error(error: Exception) -> AskRedditError:
    """Translate a generation failure into the caller-facing error type.

    Quota, billing and rate-limit failures become ``RateLimitedError``,
    rejected credentials become ``AuthError`` and everything else becomes
    ``GenerationError``.
    """
    message = str(error)
    lowered = message.lower()
    code = getattr(error, "code", None)
    status = getattr(error, "status_code", None)

    if (
        isinstance(error, openai.RateLimitError)
        or status == 429
        or code == "insufficient_quota"
        or "quota" in lowered
        or "billing" in lowered
    ):
        return RateLimitedError(
            "The answer service is over its quota. Please try again later."
        )
    if (
        isinstance(error, openai.AuthenticationError)
        or status == 401
        or "api key" in lowered
    ):
        return AuthError("The answer service rejected its credentials.", upstream_status=status)
    return GenerationError(f"Failed to generate answer: {message}")


class QueryOrchestrator:
    """Validates a question, gathers Reddit content and asks the model.

    Each call is a single attempt: nothing is retried here, and every
    failure reaches the caller as an ``AskRedditError``.
    """

    def __init__(
        self,
        reddit_client: RedditClient,
        generation_client: GenerationClient,
        settings: Settings,
    ) -> None:
        self.reddit_client = reddit_client
        self.generation_client = generation_client
        self.settings = settings

    def validate_model(self, model: Optional[str]) -> str:
        model = model or self.settings.default_model
        if model not in self.settings.allowed_models_list:
            raise ValidationError("Invalid model specified")
        return model

    async def answer(
        self, subreddit: str, question: str, model: Optional[str] = None
    ) -> GenerationResult:
        """Answer ``question`` from the last day of discussion in ``subreddit``.

        Args:
            subreddit: Subreddit name without the ``r/`` prefix
            question: The user's question
            model: One of the allowed model names, or None for the default

        Returns:
            The generated answer with a link to the subreddit as its source
        """
        subreddit = validate_subreddit(subreddit)
        question = validate_question(question)
        model = self.validate_model(model)

        logger.info(f"Processing question for r/{subreddit}: {question}")
        snapshot = await self.reddit_client.fetch_snapshot(
            subreddit, ANSWER_TIMEFRAME, ANSWER_POST_LIMIT
        )

        if not snapshot.posts:
            raise InsufficientContentError(
                "No recent content available for this subreddit"
            )

        content = build_prompt_text(
            snapshot.posts, snapshot.comments, self.settings.max_item_chars
        )
        if len(content) < self.settings.min_content_chars:
            raise InsufficientContentError("Insufficient recent content in this subreddit")

        try:
            generation = await self.generation_client.generate(
                system_prompt=create_system_prompt(subreddit),
                user_prompt=create_user_prompt(question, content, subreddit),
                model=model,
                max_tokens=self.settings.max_tokens,
                temperature=self.settings.llm_temperature,
            )
        except AskRedditError:
            raise
        except Exception as e:
            logger.error(f"Generation failed for r/{subreddit}: {e}")
            raise map_generation_error(e) from e

        logger.info(f"Answered question for r/{subreddit} ({generation.total_tokens} tokens)")

        return GenerationResult(
            answer=generation.text or "No response generated",
            sources=[
                Source(
                    title=f"Recent discussions in r/{subreddit}",
                    url=f"{self.settings.reddit_public_url}/r/{subreddit}",
                    type="post",
                )
            ],
            confidence=self.settings.answer_confidence,
            model=generation.model,
            tokens_used=generation.total_tokens,
        )
