"""Subreddit snapshot endpoints."""

import logging
import time
from typing import Union

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.deps import get_reddit_client
from app.core.config import settings
from app.core.errors import AskRedditError
from app.rag.chain import validate_subreddit
from app.rag.schemas import HealthResponse, RedditDataRequest, RedditDataResponse
from app.reddit.client import RedditClient, clamp_limit

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/reddit-data", response_model=RedditDataResponse)
async def reddit_data(
    request: RedditDataRequest,
    reddit_client: RedditClient = Depends(get_reddit_client),
) -> RedditDataResponse:
    """Fetch the current top posts and comments of a subreddit."""
    subreddit = validate_subreddit(request.subreddit)
    limit = clamp_limit(request.limit, settings.reddit_max_limit)

    snapshot = await reddit_client.fetch_snapshot(subreddit, request.timeframe, limit)
    return RedditDataResponse(success=True, data=snapshot)


@router.get("/reddit-data", response_model=HealthResponse)
async def reddit_health(
    reddit_client: RedditClient = Depends(get_reddit_client),
) -> Union[HealthResponse, JSONResponse]:
    """Check that Reddit accepts our credentials."""
    try:
        await reddit_client.ping()
    except AskRedditError as e:
        logger.error(f"Reddit API health check failed: {e}")
        failure = HealthResponse(
            success=False,
            message="Reddit API connection failed",
            error=e.message,
            timestamp=int(time.time() * 1000),
        )
        return JSONResponse(status_code=500, content=failure.model_dump())

    return HealthResponse(
        success=True,
        message="Reddit API connection successful",
        timestamp=int(time.time() * 1000),
    )
