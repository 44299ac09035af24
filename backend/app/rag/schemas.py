"""Request and response models for the API."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from app.reddit.schemas import SubredditSnapshot


class QuestionRequest(BaseModel):
    """Request model for asking questions."""

    subreddit: str = Field(..., description="Subreddit to ground the answer in")
    question: str = Field(..., description="The question to ask about the subreddit")
    model: Optional[str] = Field(None, description="Model to answer with")


class RedditDataRequest(BaseModel):
    """Request model for fetching a subreddit snapshot."""

    subreddit: str = Field(..., description="Subreddit name without the r/ prefix")
    timeframe: str = Field("24h", description="One of 24h, 48h or week")
    limit: int = Field(25, description="Number of posts, clamped to 1-100")


class Source(BaseModel):
    """A place the answer draws on."""

    title: str
    url: str
    type: Literal["post", "comment"] = "post"


class GenerationResult(BaseModel):
    """The generated answer with its sources and usage."""

    answer: str = Field(..., description="The generated answer")
    sources: list[Source] = Field(default_factory=list, description="Sources used")
    confidence: float = Field(..., ge=0.0, le=1.0)
    model: str = Field(..., description="Model that produced the answer")
    tokens_used: Optional[int] = Field(None, description="Total tokens used")


class AskQuestionResponse(BaseModel):
    """Envelope for POST /ask-question."""

    success: bool
    data: Optional[GenerationResult] = None
    error: Optional[str] = None


class RedditDataResponse(BaseModel):
    """Envelope for POST /reddit-data."""

    success: bool
    data: Optional[SubredditSnapshot] = None
    error: Optional[str] = None


class ErrorResponse(BaseModel):
    """Envelope returned for every failure."""

    success: bool = False
    error: str
    category: str
    retryable: bool = False


class HealthResponse(BaseModel):
    """Result of a collaborator connectivity check."""

    success: bool
    message: str
    timestamp: int
    model: Optional[str] = None
    error: Optional[str] = None
