"""
result_builder.py: Reshape the model's JSON into an AnalysisResult.

The model is asked for a fixed schema (see ai/prompts.py) but any field
may be missing or malformed. Every field therefore has a literal
fallback, and a few secondary numbers are derived with fixed thresholds:

  risk_level        trust ≥ 70 → low, ≥ 40 → medium, else high
  edge_connections  floor(keypoints × 1.6)
  robustness rows   pass while |drift| stays within the row's tolerance

Missing means absent / null / non-numeric. A reported 0 is kept.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from deeptrust.models.analysis import (
    AnalysisResult,
    AnomalyRegion,
    FrameData,
    GraphStats,
    HeatmapRegion,
    Observation,
    RobustnessTest,
)
from deeptrust.services.coerce import as_dict, as_list, as_number, as_text, clamp, number_or
from deeptrust.services.consistency import compute_consistency_check
from deeptrust.services.fusion import build_modality_scores, compute_fused_score, supplied_modalities

logger = logging.getLogger(__name__)

# ── Defaults ──────────────────────────────────────────────────────────────────

DEFAULT_TRUST_SCORE = 50.0
DEFAULT_VERDICT = "Analysis Complete"
DEFAULT_CLEAN_CONFIDENCE = 85.0
MIN_ROBUSTNESS_CONFIDENCE = 40.0

DEFAULT_KEYPOINTS = 24
DEFAULT_SUSPICIOUS_NODES = 0
DEFAULT_GRAPH_COHERENCE = 90.0
EDGES_PER_KEYPOINT = 1.6

MAX_OBSERVATIONS = 5
MAX_LIST_ITEMS = 200

_OBSERVATION_TYPES = {"positive", "neutral", "concern"}
_SEVERITIES = {"low", "medium", "high"}
_ANOMALY_TYPES = {"face_warp", "temporal_inconsistency", "lighting_mismatch", "edge_artifact"}

# ── Robustness scenarios ──────────────────────────────────────────────────────
# (mode, description, robustnessAnalysis key, default drift, max |drift| to pass)

_ROBUSTNESS_SCENARIOS = [
    ("Compressed", "JPEG compression at 60% quality", "compressionResilience", -5.0, 10.0),
    ("Degraded",   "Low-quality capture simulation",  "degradationResilience", -8.0, 12.0),
    ("Motion",     "Motion blur applied",             "motionSensitivity",    -18.0, 15.0),
    ("Noise",      "Gaussian noise injection",        "noiseTolerance",        -7.0, 10.0),
]

_RISK_THRESHOLDS = [
    (70, "low"),
    (40, "medium"),
    (0,  "high"),
]


# ── Derived values ────────────────────────────────────────────────────────────

def compute_risk_level(trust_score: float) -> str:
    for threshold, level in _RISK_THRESHOLDS:
        if trust_score >= threshold:
            return level
    return "high"


def compute_edge_connections(keypoints: int) -> int:
    return math.floor(keypoints * EDGES_PER_KEYPOINT)


def build_robustness_tests(analysis: dict[str, Any], reported_trust: float | None) -> list[RobustnessTest]:
    """
    Five fixed scenario rows: the clean baseline plus four degradations.

    The baseline is the model's cleanConfidence, else its trust score,
    else 85. Each degraded row applies its drift to the baseline, floored at 40.
    """
    clean = as_number(analysis.get("cleanConfidence"))
    if clean is None:
        clean = DEFAULT_CLEAN_CONFIDENCE if reported_trust is None else reported_trust
    clean = clamp(clean, 0, 100)

    tests = [
        RobustnessTest(
            mode="Clean",
            description="Baseline reference analysis",
            confidence=clean,
            drift=0,
            status="pass",
        )
    ]
    for mode, description, key, default_drift, tolerance in _ROBUSTNESS_SCENARIOS:
        drift = number_or(analysis.get(key), default_drift)
        tests.append(
            RobustnessTest(
                mode=mode,
                description=description,
                confidence=clamp(max(MIN_ROBUSTNESS_CONFIDENCE, clean + drift), 0, 100),
                drift=drift,
                status="pass" if abs(drift) <= tolerance else "warning",
            )
        )
    return tests


def build_graph_stats(raw: dict[str, Any]) -> GraphStats:
    keypoints = max(0, int(number_or(raw.get("keypointsDetected"), DEFAULT_KEYPOINTS)))
    return GraphStats(
        keypoints_detected=keypoints,
        edge_connections=compute_edge_connections(keypoints),
        suspicious_nodes=max(0, int(number_or(raw.get("suspiciousNodes"), DEFAULT_SUSPICIOUS_NODES))),
        graph_coherence=clamp(number_or(raw.get("graphCoherence"), DEFAULT_GRAPH_COHERENCE), 0, 100),
    )


# ── List sections ─────────────────────────────────────────────────────────────

def build_observations(raw: Any) -> list[Observation]:
    observations = []
    for item in as_list(raw)[:MAX_OBSERVATIONS]:
        entry = as_dict(item)
        obs_type = entry.get("type")
        observations.append(
            Observation(
                type=obs_type if obs_type in _OBSERVATION_TYPES else "neutral",
                title=as_text(entry.get("title"), "Observation"),
                description=as_text(entry.get("description"), ""),
            )
        )
    return observations


def build_heatmap_regions(raw: Any) -> list[HeatmapRegion]:
    regions = []
    for item in as_list(raw)[:MAX_LIST_ITEMS]:
        if not isinstance(item, dict):
            continue
        label = item.get("label")
        regions.append(
            HeatmapRegion(
                x=clamp(number_or(item.get("x"), 0.5), 0, 1),
                y=clamp(number_or(item.get("y"), 0.5), 0, 1),
                radius=clamp(number_or(item.get("radius"), 0.1), 0, 1),
                intensity=clamp(number_or(item.get("intensity"), 0.5), 0, 1),
                label=label.strip() if isinstance(label, str) and label.strip() else None,
            )
        )
    return regions


def build_audio_anomalies(raw: Any) -> list[AnomalyRegion]:
    anomalies = []
    for item in as_list(raw)[:MAX_LIST_ITEMS]:
        if not isinstance(item, dict):
            continue
        start = as_number(item.get("start"))
        end = as_number(item.get("end"))
        if start is None or end is None:
            continue
        start, end = sorted((max(0.0, start), max(0.0, end)))
        severity = item.get("severity")
        anomalies.append(
            AnomalyRegion(start=start, end=end, severity=severity if severity in _SEVERITIES else "medium")
        )
    return anomalies


def build_frame_analysis(raw: Any) -> list[FrameData]:
    frames = []
    for index, item in enumerate(as_list(raw)[:MAX_LIST_ITEMS]):
        if not isinstance(item, dict):
            continue
        confidence = as_number(item.get("confidence"))
        if confidence is None:
            continue
        anomaly = item.get("anomalyType")
        frames.append(
            FrameData(
                frame_number=max(0, int(number_or(item.get("frameNumber"), index))),
                timestamp=max(0.0, number_or(item.get("timestamp"), 0.0)),
                confidence=clamp(confidence, 0, 100),
                anomaly_type=anomaly if anomaly in _ANOMALY_TYPES else None,
            )
        )
    frames.sort(key=lambda f: f.frame_number)
    return frames


# ── Entry point ───────────────────────────────────────────────────────────────

def build_analysis_result(data: dict[str, Any], media_type: str, analysis_time: float) -> AnalysisResult:
    """
    Build the normalised result from the model's parsed JSON.

    Args:
        data:          Parsed JSON object from the model reply.
        media_type:    "image" | "video" | "audio".
        analysis_time: Wall-clock seconds spent on the request.
    """
    reported_trust = as_number(data.get("trustScore"))
    if reported_trust is None:
        logger.warning("Model reply has no usable trustScore; defaulting to %s", DEFAULT_TRUST_SCORE)
    trust_score = clamp(DEFAULT_TRUST_SCORE if reported_trust is None else reported_trust, 0, 100)

    modality_scores = build_modality_scores(data.get("modalityScores"), media_type, trust_score)
    # Default-filled modalities would compare the trust score with itself.
    reported = supplied_modalities(data.get("modalityScores"))
    reported_scores = [m for m in modality_scores if m.modality in reported]

    return AnalysisResult(
        trust_score=trust_score,
        risk_level=compute_risk_level(trust_score),
        verdict=as_text(data.get("verdict"), DEFAULT_VERDICT),
        analysis_time=round(analysis_time, 1),
        media_type=media_type,
        observations=build_observations(data.get("observations")),
        robustness_tests=build_robustness_tests(as_dict(data.get("robustnessAnalysis")), reported_trust),
        graph_stats=build_graph_stats(as_dict(data.get("graphStats"))),
        heatmap_regions=build_heatmap_regions(data.get("heatmapRegions")),
        audio_anomalies=build_audio_anomalies(data.get("audioAnomalies")) if media_type != "image" else [],
        frame_analysis=build_frame_analysis(data.get("frameAnalysis")) if media_type == "video" else [],
        modality_scores=modality_scores,
        fused_score=compute_fused_score(modality_scores, trust_score),
        consistency=compute_consistency_check(trust_score, media_type, reported_scores),
    )
