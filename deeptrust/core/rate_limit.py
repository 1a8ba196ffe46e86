"""
rate_limit.py: Global rate limiter instance.

Uses slowapi (a Starlette-compatible wrapper around the `limits` library).
Requests are keyed by client IP address.

Usage in routes:
    from fastapi import Request
    from deeptrust.core.rate_limit import limiter

    @router.post("/some-ai-endpoint")
    @limiter.limit(settings.analyze_rate_limit)
    async def my_endpoint(request: Request, payload: MyRequest):
        ...

This is our own per-IP limit. Upstream rate limits (the model provider
returning 429) are a separate path; see core/errors.py.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
