"""
DeepTrust API: Application entry point.

Bootstraps FastAPI, wires up middleware, error handlers and route groups.

Extension points:
  - Add new route groups with app.include_router() below
  - Add new middleware in the middleware block
  - Change startup behaviour in the lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from deeptrust import __version__
from deeptrust.core.config import settings
from deeptrust.core.errors import AnalysisError, analysis_error_handler
from deeptrust.core.rate_limit import limiter
from deeptrust.routes.analyze import router as analyze_router
from deeptrust.routes.health import router as health_router

# ─── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ─── Lifespan ──────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Code before `yield` runs on startup; code after runs on shutdown."""
    logger.info(
        "Starting DeepTrust API (env: %s, provider: %s, mock: %s)",
        settings.environment,
        settings.ai_provider,
        settings.ai_mock_mode,
    )
    yield
    logger.info("Shutting down DeepTrust API")


# ─── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="DeepTrust API",
    description=(
        "Deepfake analysis for images, video and audio. "
        "Forensic judgments come from a hosted multimodal model and are probabilistic; not guaranteed."
    ),
    version=__version__,
    lifespan=lifespan,
    # Disable docs in production to reduce attack surface
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
)


# ─── Rate limiting ─────────────────────────────────────────────────────────────
# Attach the limiter to app state so slowapi can find it.
# Routes opt-in with @limiter.limit("N/minute") + request: Request parameter.
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ─── Errors ────────────────────────────────────────────────────────────────────
# Every analysis failure is rendered as {"error": "..."} with its own status.
app.add_exception_handler(AnalysisError, analysis_error_handler)

# ─── Middleware ─────────────────────────────────────────────────────────────────
# CORS: the dashboard is served from a different origin than the API.
# Credentials are only allowed when origins are listed explicitly.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Routes ────────────────────────────────────────────────────────────────────
app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(analyze_router)


@app.get("/", tags=["root"])
async def root():
    """API root; basic metadata."""
    return {
        "name": "DeepTrust API",
        "version": __version__,
        "status": "running",
        "environment": settings.environment,
        "docs": "/docs",
    }
