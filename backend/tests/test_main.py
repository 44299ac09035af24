"""Basic tests for the FastAPI application."""

from unittest.mock import patch

from fastapi.testclient import TestClient

from app.core.config import settings
from app.main import app, run
from app.rag.chain import QueryOrchestrator
from app.reddit.client import RedditClient

client = TestClient(app)


def test_read_root() -> None:
    """Test the root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {
        "message": "Ask Reddit AI API",
        "version": "0.1.0",
        "docs": "/docs",
    }


def test_health_check() -> None:
    """Test the health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_lifespan_builds_components() -> None:
    """Startup wires the Reddit client and orchestrator onto app.state."""
    with TestClient(app):
        state = app.state
        assert isinstance(state.reddit_client, RedditClient)
        assert isinstance(state.orchestrator, QueryOrchestrator)
        assert state.orchestrator.reddit_client is state.reddit_client
        assert state.reddit_client.token_cache.http_client is state.reddit_client.http_client


def test_run_serves_on_configured_address() -> None:
    with patch("app.main.uvicorn.run") as run_server:
        run()

    run_server.assert_called_once_with(
        app, host=settings.backend_host, port=settings.backend_port
    )
