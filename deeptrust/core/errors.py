"""
errors.py: Failure modes of a single analysis request.

Every failure aborts the request: there are no retries and no partial
results. Each exception carries the HTTP status it maps to, and
`analysis_error_handler` (registered in main.py) renders it as

    {"error": "<message>"}

which is the shape the dashboard reads (`data.error`).
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """Base class; a request-ending failure with an HTTP status."""

    status_code: int = 500
    default_message: str = "Analysis failed"

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class MissingMediaError(AnalysisError):
    status_code = 400
    default_message = "No image data provided"


class MediaTooLargeError(AnalysisError):
    status_code = 413
    default_message = "Media payload too large"


class MissingCredentialError(AnalysisError):
    """The selected provider has no API key configured (server misconfig)."""

    status_code = 500

    def __init__(self, env_var: str) -> None:
        super().__init__(f"{env_var} is not configured")


class UpstreamRateLimitError(AnalysisError):
    status_code = 429
    default_message = "Rate limit exceeded. Please try again in a moment."


class UpstreamQuotaError(AnalysisError):
    status_code = 402
    default_message = "AI credits exhausted. Please add credits to continue."


class UpstreamError(AnalysisError):
    status_code = 500
    default_message = "No response from AI model"


class ResponseParseError(AnalysisError):
    status_code = 500
    default_message = "Failed to parse analysis results"


async def analysis_error_handler(request: Request, exc: AnalysisError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Analysis error on %s: %s", request.url.path, exc.message)
    else:
        logger.info("Analysis rejected on %s (%d): %s", request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
