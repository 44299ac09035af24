"""Question answering endpoints."""

import logging
import time
from typing import Union

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.deps import enforce_rate_limit, get_generation_client, get_orchestrator
from app.core.config import settings
from app.rag.chain import QueryOrchestrator
from app.rag.generator import GenerationClient
from app.rag.schemas import AskQuestionResponse, HealthResponse, QuestionRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/ask-question",
    response_model=AskQuestionResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
async def ask_question(
    request: QuestionRequest,
    orchestrator: QueryOrchestrator = Depends(get_orchestrator),
) -> AskQuestionResponse:
    """Answer a question from recent discussion in a subreddit.

    Failures are raised as ``AskRedditError`` and rendered into the error
    envelope by the application's exception handler.

    Args:
        request: Subreddit, question and optional model name

    Returns:
        Envelope holding the generated answer
    """
    result = await orchestrator.answer(request.subreddit, request.question, request.model)
    return AskQuestionResponse(success=True, data=result)


@router.get("/ask-question", response_model=HealthResponse)
async def generation_health(
    generation_client: GenerationClient = Depends(get_generation_client),
) -> Union[HealthResponse, JSONResponse]:
    """Check that the generation service answers a trivial prompt."""
    try:
        generation = await generation_client.generate(
            system_prompt="You are a health check.",
            user_prompt="Hello",
            model=settings.default_model,
            max_tokens=5,
            temperature=0,
        )
    except Exception as e:
        logger.error(f"OpenAI API health check failed: {e}")
        failure = HealthResponse(
            success=False,
            message="OpenAI API connection failed",
            error=str(e),
            timestamp=int(time.time() * 1000),
        )
        return JSONResponse(status_code=500, content=failure.model_dump())

    return HealthResponse(
        success=True,
        message="OpenAI API connection successful",
        model=generation.model,
        timestamp=int(time.time() * 1000),
    )
