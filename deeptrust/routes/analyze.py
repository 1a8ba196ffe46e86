"""
analyze.py: Media analysis endpoints.

Routes:
  POST /api/v1/analyze-media  full deepfake analysis of one image / video / audio file
  POST /api/v1/consistency    re-run the multimodal consistency check on given scores

HOW THE DATA FLOWS
──────────────────
1. The dashboard reads the file with FileReader.readAsDataURL() and posts
   {"imageBase64": "data:video/mp4;base64,...", "mediaType": "video"}.
   Bare base64 is also accepted; it gets a default MIME for its media type.
2. The forensic system prompt plus the media go to the model in one call
   (ai/gemini_client.py). Upstream 429 / 402 pass straight through.
3. The JSON in the reply is extracted (ai/response_parser.py). A reply that
   doesn't parse fails the request with 500; there is no inconclusive fallback.
4. services/result_builder.py fills defaults, derives risk level, robustness
   rows, graph edges, fused score and the consistency check.

Errors are returned as {"error": "..."} (see core/errors.py).

TESTING YOUR CHANGES
─────────────────────
  pytest tests/test_analyze.py -v

  # Manual test:
  python scripts/analyze_file.py path/to/photo.jpg
"""

import logging
import time

from fastapi import APIRouter, Request

from deeptrust.ai.gemini_client import gemini_client
from deeptrust.ai.prompts import SYSTEM_PROMPT, build_user_prompt
from deeptrust.ai.response_parser import extract_json
from deeptrust.core.config import settings
from deeptrust.core.errors import AnalysisError, MediaTooLargeError, MissingMediaError
from deeptrust.core.rate_limit import limiter
from deeptrust.models.analysis import (
    AnalysisResult,
    AnalyzeMediaRequest,
    ConsistencyRequest,
    ConsistencyResult,
    ErrorResponse,
)
from deeptrust.services.consistency import compute_consistency_check
from deeptrust.services.media import normalize_media_type, split_data_url, to_data_url
from deeptrust.services.result_builder import build_analysis_result

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["analysis"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "No media supplied"},
    402: {"model": ErrorResponse, "description": "AI provider credits exhausted"},
    413: {"model": ErrorResponse, "description": "Media payload too large"},
    429: {"model": ErrorResponse, "description": "Rate limit exceeded (ours or the provider's)"},
    500: {"model": ErrorResponse, "description": "Missing credential, provider error or unparseable reply"},
}


@router.post("/analyze-media", response_model=AnalysisResult, responses=_ERROR_RESPONSES)
@limiter.limit(settings.analyze_rate_limit)
async def analyze_media(request: Request, payload: AnalyzeMediaRequest):
    """
    Analyse base64-encoded media for deepfake manipulation.

    Returns the normalised AnalysisResult: trust score (0–100), risk level,
    verdict, observations, robustness rows, graph stats, heatmap / frame /
    audio detail, modality scores, fused score and consistency check.
    """
    start = time.perf_counter()

    media_b64 = payload.image_base64
    if not media_b64:
        raise MissingMediaError()
    if len(media_b64) > settings.max_media_b64_chars:
        raise MediaTooLargeError(
            f"Media payload too large ({len(media_b64)} base64 chars > {settings.max_media_b64_chars})"
        )

    # An explicit mediaType wins; otherwise trust the data: URL's MIME.
    media_type = normalize_media_type(payload.media_type or split_data_url(media_b64)[0])
    logger.info("Analysing %s (%d base64 chars)", media_type, len(media_b64))

    try:
        raw = await gemini_client.analyze_media(
            SYSTEM_PROMPT,
            build_user_prompt(media_type),
            to_data_url(media_b64, media_type),
            response_key=f"analysis_{media_type}",
        )
        data = extract_json(raw)
        result = build_analysis_result(data, media_type, time.perf_counter() - start)
    except AnalysisError:
        raise
    except Exception as exc:
        logger.exception("Unexpected analysis failure")
        raise AnalysisError("Analysis failed") from exc

    logger.info(
        "Analysis done: media=%s trust=%.1f risk=%s consistency=%s in %.1fs",
        media_type,
        result.trust_score,
        result.risk_level,
        result.consistency.consistency_status,
        result.analysis_time,
    )
    return result


@router.post("/consistency", response_model=ConsistencyResult)
async def consistency_check(payload: ConsistencyRequest):
    """
    Compare visual and audio modality scores and return the confidence penalty.

    Pure computation; no model call. Lets the dashboard re-check edited
    or stored scores without re-uploading the media.
    """
    return compute_consistency_check(payload.trust_score, payload.media_type, payload.modality_scores)
