"""
pytest configuration and shared fixtures for the DeepTrust API tests.

Key concern: tests must not require a live model API key.
We achieve this by:
  1. Setting AI_MOCK_MODE=true before the app is imported, so the
     GeminiClient singleton returns canned responses.
  2. Raising the analyze-media rate limit and resetting the in-memory
     limiter before every test, so request counts don't bleed between tests.

Tests that exercise the real-mode client paths build their own
GeminiClient with an httpx.MockTransport (see test_gemini_client.py).
"""

import os

import pytest
from httpx import ASGITransport, AsyncClient

# Set env vars BEFORE importing the app so Settings picks them up correctly
os.environ.setdefault("AI_MOCK_MODE", "true")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("ANALYZE_RATE_LIMIT", "1000/minute")


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Start every test with an empty rate-limit bucket."""
    from deeptrust.core.rate_limit import limiter

    limiter.reset()
    yield


@pytest.fixture()
async def client():
    """
    HTTPX async test client wired to the FastAPI app.

    Usage:
        async def test_something(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    from deeptrust.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
