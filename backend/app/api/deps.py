"""FastAPI dependencies that hand out the components built at startup."""

from fastapi import Depends, Request

from app.core.config import settings
from app.core.rate_limit import DailyRateLimiter
from app.rag.chain import QueryOrchestrator
from app.rag.generator import GenerationClient
from app.reddit.client import RedditClient


def get_reddit_client(request: Request) -> RedditClient:
    """Get the shared Reddit client."""
    return request.app.state.reddit_client


def get_generation_client(request: Request) -> GenerationClient:
    """Get the shared generation client."""
    return request.app.state.generation_client


def get_orchestrator(request: Request) -> QueryOrchestrator:
    """Get the question answering pipeline."""
    return request.app.state.orchestrator


def get_rate_limiter(request: Request) -> DailyRateLimiter:
    """Get the per-caller request counter."""
    return request.app.state.rate_limiter


def caller_identity(request: Request) -> str:
    """Identify the caller by the connecting host.

    ``X-Forwarded-For`` is only read when the connection comes from one of
    the configured trusted proxies; otherwise the header is ignored.
    """
    host = request.client.host if request.client else "unknown"
    if host not in settings.trusted_proxies_list:
        return host
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded.strip():
        return forwarded.split(",")[0].strip()
    return host


def enforce_rate_limit(
    request: Request,
    limiter: DailyRateLimiter = Depends(get_rate_limiter),
) -> None:
    """Count this request against the caller's daily allowance when enabled."""
    if not settings.rate_limit_enabled:
        return
    limiter.hit(caller_identity(request))
