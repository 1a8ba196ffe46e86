"""
analysis.py: Pydantic models for the media analysis API.

The dashboard is a JavaScript client, so every model serialises with
camelCase keys (trustScore, riskLevel, ...). Python code uses the
snake_case attribute names; both spellings are accepted on input.

Shape of a full result:
  - headline: trust_score, risk_level, verdict, analysis_time, media_type
  - observations: up to 5 free-text findings from the model
  - robustness_tests: five fixed scenario rows (Clean/Compressed/...)
  - graph_stats: facial landmark graph numbers
  - heatmap_regions / frame_analysis / audio_anomalies: per-region,
    per-frame and per-time-span detail, empty when the model omits them
  - modality_scores + fused_score: static weighted fusion
  - consistency: visual vs audio agreement check
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MediaType = Literal["image", "video", "audio"]
RiskLevel = Literal["low", "medium", "high"]
ObservationType = Literal["positive", "neutral", "concern"]
RobustnessStatus = Literal["pass", "warning", "fail"]
Severity = Literal["low", "medium", "high"]
Modality = Literal["visual", "audio", "temporal", "structural"]
AnomalyType = Literal["face_warp", "temporal_inconsistency", "lighting_mismatch", "edge_artifact"]
ConsistencyStatus = Literal[
    "consistent", "partially_consistent", "inconsistent", "single_modality", "not_applicable"
]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Request models ─────────────────────────────────────────────────────────────

class AnalyzeMediaRequest(CamelModel):
    """
    Media submitted for analysis.

    image_base64 is optional at the schema level so an empty body yields
    our own 400 {"error": ...} rather than FastAPI's 422.
    It may be raw base64 or a full data: URL (FileReader.readAsDataURL output).
    """

    image_base64: str | None = Field(default=None, description="Base64 media or data: URL")
    media_type: str | None = Field(default=None, description='"image" | "video" | "audio" or a MIME type')


# ── Result sub-models ──────────────────────────────────────────────────────────

class Observation(CamelModel):
    type: ObservationType = "neutral"
    title: str = "Observation"
    description: str = ""


class RobustnessTest(CamelModel):
    mode: str
    description: str
    confidence: float
    drift: float
    status: RobustnessStatus


class GraphStats(CamelModel):
    keypoints_detected: int
    edge_connections: int
    suspicious_nodes: int
    graph_coherence: float


class HeatmapRegion(CamelModel):
    """A suspicious region; x, y and radius are fractions of the frame (0–1)."""

    x: float
    y: float
    radius: float
    intensity: float
    label: str | None = None


class AnomalyRegion(CamelModel):
    """An anomalous audio span, in seconds."""

    start: float
    end: float
    severity: Severity = "medium"


class FrameData(CamelModel):
    frame_number: int
    timestamp: float
    confidence: float
    anomaly_type: AnomalyType | None = None


class ModalityReading(CamelModel):
    """A bare per-modality score, all the consistency check needs."""

    modality: Modality
    score: float


class ModalityScore(ModalityReading):
    weight: float
    confidence: float
    findings: list[str] = Field(default_factory=list)


class ConsistencyResult(CamelModel):
    consistency_status: ConsistencyStatus
    visual_score: float
    audio_score: float | None
    disagreement: float
    confidence_modifier: int
    adjusted_confidence: float
    explanation: str


class AnalysisResult(CamelModel):
    trust_score: float
    risk_level: RiskLevel
    verdict: str
    analysis_time: float
    media_type: MediaType
    observations: list[Observation] = Field(default_factory=list)
    robustness_tests: list[RobustnessTest] = Field(default_factory=list)
    graph_stats: GraphStats
    heatmap_regions: list[HeatmapRegion] = Field(default_factory=list)
    audio_anomalies: list[AnomalyRegion] = Field(default_factory=list)
    frame_analysis: list[FrameData] = Field(default_factory=list)
    modality_scores: list[ModalityScore] = Field(default_factory=list)
    fused_score: float
    consistency: ConsistencyResult


class ConsistencyRequest(CamelModel):
    """Inputs for a stand-alone consistency check (dashboard re-computation)."""

    trust_score: float = Field(..., ge=0, le=100)
    media_type: MediaType = "image"
    modality_scores: list[ModalityReading] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
