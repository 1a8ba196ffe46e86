"""
Health check endpoint.

Used by:
  - Docker HEALTHCHECK instruction
  - Load balancers / orchestrators
  - The dashboard, to check API connectivity before enabling upload

Reports whether model calls are mocked so a deployment accidentally left
in mock mode is visible at a glance.
"""

import logging

from fastapi import APIRouter
from pydantic import BaseModel

from deeptrust import __version__

logger = logging.getLogger(__name__)
router = APIRouter()


class HealthResponse(BaseModel):
    status: str  # Always "ok" if the API process is alive
    version: str
    ai_mode: str  # "mock" | "real"
    ai_provider: str
    environment: str


@router.get("", response_model=HealthResponse, summary="API health check")
async def health_check() -> HealthResponse:
    """Returns the liveness status of the API and how model calls are served."""
    from deeptrust.ai.gemini_client import gemini_client
    from deeptrust.core.config import settings

    return HealthResponse(
        status="ok",
        version=__version__,
        ai_mode="mock" if gemini_client.mock_mode else "real",
        ai_provider=gemini_client.provider,
        environment=settings.environment,
    )
