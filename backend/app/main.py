"""Main FastAPI application."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.endpoints import chat, reddit
from app.core.config import settings
from app.core.errors import AskRedditError
from app.core.rate_limit import DailyRateLimiter
from app.rag.chain import QueryOrchestrator
from app.rag.generator import OpenAIGenerationClient
from app.rag.schemas import ErrorResponse
from app.reddit.auth import TokenCache
from app.reddit.client import RedditClient

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)

# Quiet per-request transport logging
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the shared components on startup and close them on shutdown."""
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.reddit_timeout_seconds))
    token_cache = TokenCache(http_client, settings)
    reddit_client = RedditClient(http_client, token_cache, settings)
    generation_client = OpenAIGenerationClient(
        settings.openai_api_key, timeout=settings.llm_timeout_seconds
    )

    app.state.reddit_client = reddit_client
    app.state.generation_client = generation_client
    app.state.orchestrator = QueryOrchestrator(reddit_client, generation_client, settings)
    app.state.rate_limiter = DailyRateLimiter(
        settings.rate_limit_max_requests, settings.rate_limit_window_hours
    )
    logger.info("Application components initialised")

    yield

    await http_client.aclose()


# Create FastAPI app
app = FastAPI(
    title=settings.project_name,
    version=settings.project_version,
    openapi_url=f"{settings.api_v1_str}/openapi.json",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AskRedditError)
async def ask_reddit_error_handler(request: Request, exc: AskRedditError) -> JSONResponse:
    """Render a typed failure as the error envelope."""
    logger.warning(f"{request.method} {request.url.path} failed ({exc.category}): {exc.message}")
    body = ErrorResponse(error=exc.message, category=exc.category, retryable=exc.retryable)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as validation failures."""
    fields = sorted({str(error["loc"][-1]) for error in exc.errors() if error.get("loc")})
    message = f"Invalid request: {', '.join(fields)}" if fields else "Invalid request"
    body = ErrorResponse(error=message, category="validation")
    return JSONResponse(status_code=400, content=body.model_dump())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Hide unexpected failures behind a generic message."""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}")
    body = ErrorResponse(error="Something went wrong. Please try again.", category="unknown")
    return JSONResponse(status_code=500, content=body.model_dump())


# Include routers
app.include_router(
    chat.router,
    prefix=f"{settings.api_v1_str}",
    tags=["chat"],
)
app.include_router(
    reddit.router,
    prefix=f"{settings.api_v1_str}",
    tags=["reddit"],
)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "message": "Ask Reddit AI API",
        "version": settings.project_version,
        "docs": "/docs",
    }


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


def run() -> None:
    """Serve the API with uvicorn."""
    uvicorn.run(app, host=settings.backend_host, port=settings.backend_port)


if __name__ == "__main__":
    run()
