"""
GeminiClient: Async wrapper around the hosted multimodal model.

Supports two providers (set via AI_PROVIDER env var):
  - "gateway" (default): an OpenAI-compatible chat-completions endpoint
    (AI_GATEWAY_URL) that fronts Gemini. Called with httpx.
  - "gemini": the Google Generative AI SDK, called directly.

Supports two runtime modes (set via AI_MOCK_MODE env var):
  - MOCK mode (default): returns deterministic canned responses.
    Use for tests and local dev without API keys.
  - REAL mode: makes actual model calls. Requires the provider's key.

Unlike a best-effort adapter, failures here end the request: upstream
429 / 402 are passed through as distinct errors, everything else becomes
a generic 500 (see core/errors.py). A missing key is reported per request
so the API still boots and serves /health.

Extension pattern: add new mock response keys to _MOCK_RESPONSES and
reference them in analyze_media() calls via the response_key parameter.
"""

import logging
import os
from typing import Any

# Python 3.14 + protobuf native extension can fail when importing Gemini deps.
# Keep this as default-only so users can still override it explicitly.
os.environ.setdefault("PROTOCOL_BUFFERS_PYTHON_IMPLEMENTATION", "python")

import google.generativeai as genai
import httpx
from google.api_core import exceptions as google_exceptions

from deeptrust.core.config import settings
from deeptrust.core.errors import (
    MissingCredentialError,
    UpstreamError,
    UpstreamQuotaError,
    UpstreamRateLimitError,
)
from deeptrust.services.media import split_data_url

logger = logging.getLogger(__name__)


# Canned responses for mock mode.
# Keys map to response_key arguments in analyze_media() calls.
_MOCK_RESPONSES: dict[str, str] = {
    "default": (
        '{"trustScore": 50, "verdict": "Inconclusive", '
        '"observations": [{"type": "neutral", "title": "Mock mode", '
        '"description": "[MOCK] Set AI_MOCK_MODE=false and provide an API key for real analysis."}]}'
    ),
    "analysis_image": (
        '{"trustScore": 87, "verdict": "Likely Authentic", '
        '"observations": ['
        '{"type": "positive", "title": "Natural skin texture", '
        '"description": "[MOCK] Pore-level variation is present and consistent across the face."}, '
        '{"type": "positive", "title": "Consistent lighting", '
        '"description": "Catchlights in both eyes match the key light direction."}, '
        '{"type": "neutral", "title": "Mild JPEG compression", '
        '"description": "Block artefacts are uniform across the frame, consistent with a single save."}'
        '], '
        '"robustnessAnalysis": {"cleanConfidence": 88, "compressionResilience": -6, '
        '"degradationResilience": -9, "motionSensitivity": -14, "noiseTolerance": -7}, '
        '"graphStats": {"keypointsDetected": 30, "suspiciousNodes": 1, "graphCoherence": 93}, '
        '"heatmapRegions": [{"x": 0.42, "y": 0.38, "radius": 0.08, "intensity": 0.2, "label": "Left eye"}], '
        '"modalityScores": ['
        '{"modality": "visual", "score": 88, "confidence": 94, '
        '"findings": ["Natural lighting patterns", "Clean edges"]}, '
        '{"modality": "structural", "score": 85, "confidence": 90, '
        '"findings": ["Coherent facial geometry"]}'
        ']}'
    ),
    # Fenced on purpose; real models often wrap JSON in a code block.
    "analysis_video": (
        "Here is my analysis:\n```json\n"
        '{"trustScore": 64, "verdict": "Possibly Manipulated", '
        '"observations": ['
        '{"type": "concern", "title": "Jawline flicker", '
        '"description": "[MOCK] The blending boundary at the jaw shifts between adjacent frames."}, '
        '{"type": "positive", "title": "Stable background", '
        '"description": "Background geometry stays consistent across the clip."}'
        '], '
        '"robustnessAnalysis": {"cleanConfidence": 78, "compressionResilience": -8, '
        '"degradationResilience": -13, "motionSensitivity": -22, "noiseTolerance": -9}, '
        '"graphStats": {"keypointsDetected": 28, "suspiciousNodes": 4, "graphCoherence": 81}, '
        '"heatmapRegions": [{"x": 0.5, "y": 0.7, "radius": 0.12, "intensity": 0.65, "label": "Jawline"}], '
        '"frameAnalysis": ['
        '{"frameNumber": 0, "timestamp": 0.0, "confidence": 82, "anomalyType": null}, '
        '{"frameNumber": 12, "timestamp": 0.5, "confidence": 58, "anomalyType": "face_warp"}, '
        '{"frameNumber": 24, "timestamp": 1.0, "confidence": 61, "anomalyType": "temporal_inconsistency"}'
        '], '
        '"audioAnomalies": [{"start": 0.4, "end": 0.9, "severity": "medium"}], '
        '"modalityScores": ['
        '{"modality": "visual", "score": 70, "confidence": 88, "findings": ["Edge artifacts present"]}, '
        '{"modality": "structural", "score": 72, "confidence": 85, "findings": ["Unusual landmark spacing"]}, '
        '{"modality": "audio", "score": 48, "confidence": 80, "findings": ["Voice synthesis artifacts"]}, '
        '{"modality": "temporal", "score": 60, "confidence": 86, "findings": ["Temporal discontinuities"]}'
        ']}\n```'
    ),
    "analysis_audio": (
        '{"trustScore": 74, "verdict": "Likely Authentic", '
        '"observations": [{"type": "positive", "title": "Natural breathing", '
        '"description": "[MOCK] Breath sounds occur at phrase boundaries as in natural speech."}], '
        '"audioAnomalies": [{"start": 3.2, "end": 3.6, "severity": "low"}], '
        '"modalityScores": ['
        '{"modality": "visual", "score": 76, "confidence": 60, "findings": []}, '
        '{"modality": "audio", "score": 71, "confidence": 87, "findings": ["Natural voice patterns"]}'
        ']}'
    ),
}


class GeminiClient:
    """
    Central model interface for the DeepTrust backend.

    Don't instantiate per-request; use the module-level `gemini_client`
    singleton. Tests build their own instance (optionally with an
    httpx transport) to exercise the real-mode paths.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.mock_mode = settings.ai_mock_mode
        self.provider = settings.ai_provider.lower()
        self.model = settings.ai_model
        self.gateway_url = settings.ai_gateway_url
        self.gateway_api_key = settings.ai_gateway_api_key
        self.gemini_api_key = settings.gemini_api_key
        self.timeout = settings.ai_timeout_seconds
        self._transport = transport

        if self.provider not in ("gateway", "gemini"):
            raise ValueError(f"Unknown AI_PROVIDER {settings.ai_provider!r} (expected 'gateway' or 'gemini')")

        if self.mock_mode:
            logger.info("GeminiClient initialised in MOCK mode")
        else:
            if self.provider == "gemini" and self.gemini_api_key:
                genai.configure(api_key=self.gemini_api_key)
            logger.info("GeminiClient initialised in REAL mode (provider=%s, model=%s)", self.provider, self.model)

    async def analyze_media(
        self,
        system_prompt: str,
        user_prompt: str,
        data_url: str,
        response_key: str = "default",
    ) -> str:
        """
        Send the prompts plus the media to the model and return its reply text.

        Args:
            system_prompt: Instruction prompt fixing the JSON schema.
            user_prompt:   Short per-request instruction.
            data_url:      Media as a data: URL ("data:image/png;base64,...").
            response_key:  Mock response key (ignored in real mode).

        Raises:
            MissingCredentialError:  provider key not configured.
            UpstreamRateLimitError:  provider returned 429.
            UpstreamQuotaError:      provider returned 402.
            UpstreamError:           any other provider failure or empty reply.
        """
        if self.mock_mode:
            return _MOCK_RESPONSES.get(response_key, _MOCK_RESPONSES["default"])

        if self.provider == "gemini":
            return await self._generate_with_sdk(system_prompt, user_prompt, data_url)
        return await self._generate_with_gateway(system_prompt, user_prompt, data_url)

    # ── Gateway (OpenAI-compatible chat completions) ──────────────────────────

    async def _generate_with_gateway(self, system_prompt: str, user_prompt: str, data_url: str) -> str:
        if not self.gateway_api_key:
            raise MissingCredentialError("AI_GATEWAY_API_KEY")

        body: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": user_prompt},
                        {"type": "image_url", "image_url": {"url": data_url}},
                    ],
                },
            ],
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    self.gateway_url,
                    headers={
                        "Authorization": f"Bearer {self.gateway_api_key}",
                        "Content-Type": "application/json",
                    },
                    json=body,
                )
            except httpx.HTTPError as exc:
                logger.error("AI gateway request failed: %s", exc)
                raise UpstreamError("AI gateway request failed") from exc

        if response.status_code == 429:
            raise UpstreamRateLimitError()
        if response.status_code == 402:
            raise UpstreamQuotaError()
        if response.is_error:
            logger.error("AI gateway error: %s; %s", response.status_code, response.text[:200])
            raise UpstreamError(f"AI gateway error: {response.status_code}")

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            content = None

        if not content:
            raise UpstreamError("No response from AI model")
        return content

    # ── Direct Gemini SDK ─────────────────────────────────────────────────────

    async def _generate_with_sdk(self, system_prompt: str, user_prompt: str, data_url: str) -> str:
        if not self.gemini_api_key:
            raise MissingCredentialError("GEMINI_API_KEY")

        # The SDK wants the bare model id ("gemini-2.5-flash").
        model_name = self.model.split("/", 1)[-1]
        mime_type, media_b64 = split_data_url(data_url)

        try:
            gemini_model = genai.GenerativeModel(model_name, system_instruction=system_prompt)
            contents = [
                {"text": user_prompt},
                {"inline_data": {"mime_type": mime_type, "data": media_b64}},
            ]
            response = await gemini_model.generate_content_async(contents)
            text = response.text
        except google_exceptions.ResourceExhausted as exc:
            logger.warning("Gemini quota / rate limit hit: %s", exc)
            raise UpstreamRateLimitError() from exc
        except Exception as exc:
            logger.error("Gemini API error (model=%s, mime=%s): %s", model_name, mime_type, exc)
            raise UpstreamError("AI model error") from exc

        if not text:
            raise UpstreamError("No response from AI model")
        return text


# Module-level singleton; import and use this everywhere
gemini_client = GeminiClient()
