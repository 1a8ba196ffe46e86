"""
fusion.py: Static weighted multimodal fusion.

Each modality gets a fixed weight; the fused score is the weighted mean
of the modality scores present for the media type:

    visual      0.35   (always)
    structural  0.25   (always)
    audio       0.20   (video, audio)
    temporal    0.20   (video)

The model may report its own per-modality scores (and weights). Any applicable
modality it leaves out is filled deterministically from the trust
score, with a fixed findings list picked by whether the trust score
is above 70.
"""

from __future__ import annotations

from typing import Any

from deeptrust.models.analysis import ModalityReading, ModalityScore
from deeptrust.services.coerce import as_dict, as_list, as_number, clamp, number_or

MODALITY_WEIGHTS = {
    "visual": 0.35,
    "structural": 0.25,
    "audio": 0.20,
    "temporal": 0.20,
}

_MODALITIES_BY_MEDIA = {
    "image": ("visual", "structural"),
    "audio": ("visual", "structural", "audio"),
    "video": ("visual", "structural", "audio", "temporal"),
}

_DEFAULT_CONFIDENCE = {
    "visual": 95.0,
    "structural": 92.0,
    "audio": 90.0,
    "temporal": 93.0,
}

_CLEAN_THRESHOLD = 70

_CLEAN_FINDINGS = {
    "visual": ["Natural lighting patterns", "Consistent texture quality", "Clean edges"],
    "structural": ["Coherent facial geometry", "Natural landmark positions"],
    "audio": ["Natural voice patterns", "Consistent audio quality"],
    "temporal": ["Smooth motion flow", "Consistent frame transitions"],
}

_SUSPICIOUS_FINDINGS = {
    "visual": ["Unusual smoothness detected", "Potential texture inconsistency", "Edge artifacts present"],
    "structural": ["Geometric inconsistencies", "Unusual landmark spacing"],
    "audio": ["Voice synthesis artifacts", "Unnatural pitch variations"],
    "temporal": ["Temporal discontinuities", "Frame interpolation artifacts"],
}

_MAX_FINDINGS = 5


def applicable_modalities(media_type: str) -> tuple[str, ...]:
    return _MODALITIES_BY_MEDIA.get(media_type, _MODALITIES_BY_MEDIA["image"])


def default_modality(modality: str, trust_score: float) -> ModalityScore:
    findings = _CLEAN_FINDINGS if trust_score > _CLEAN_THRESHOLD else _SUSPICIOUS_FINDINGS
    return ModalityScore(
        modality=modality,
        score=clamp(trust_score, 0, 100),
        weight=MODALITY_WEIGHTS[modality],
        confidence=_DEFAULT_CONFIDENCE[modality],
        findings=list(findings[modality]),
    )


def _from_model(entry: dict[str, Any], trust_score: float) -> ModalityScore:
    modality = entry["modality"]
    findings = [f.strip() for f in as_list(entry.get("findings")) if isinstance(f, str) and f.strip()]
    return ModalityScore(
        modality=modality,
        score=clamp(number_or(entry.get("score"), trust_score), 0, 100),
        weight=clamp(number_or(entry.get("weight"), MODALITY_WEIGHTS[modality]), 0, 1),
        confidence=clamp(number_or(entry.get("confidence"), _DEFAULT_CONFIDENCE[modality]), 0, 100),
        findings=findings[:_MAX_FINDINGS],
    )


def supplied_modalities(raw: Any) -> dict[str, dict[str, Any]]:
    """Model-reported entries keyed by lowercased modality; duplicates keep the first."""
    supplied: dict[str, dict[str, Any]] = {}
    for item in as_list(raw):
        entry = as_dict(item)
        modality = entry.get("modality")
        if isinstance(modality, str):
            modality = modality.strip().lower()
            entry = {**entry, "modality": modality}
        if modality in MODALITY_WEIGHTS and modality not in supplied:
            supplied[modality] = entry
    return supplied


def build_modality_scores(raw: Any, media_type: str, trust_score: float) -> list[ModalityScore]:
    """
    Merge model-supplied modality scores with deterministic defaults.

    Output order follows the weight table; entries for modalities that
    don't apply to the media type are dropped.
    """
    supplied = supplied_modalities(raw)
    scores = []
    for modality in applicable_modalities(media_type):
        if modality in supplied:
            scores.append(_from_model(supplied[modality], trust_score))
        else:
            scores.append(default_modality(modality, trust_score))
    return scores


def compute_fused_score(modality_scores: list[ModalityScore], fallback: float) -> float:
    """Weighted mean of the modality scores, rounded to one decimal."""
    total_weight = sum(m.weight for m in modality_scores)
    if total_weight <= 0:
        return round(clamp(fallback, 0, 100), 1)
    weighted = sum(m.score * m.weight for m in modality_scores)
    return round(weighted / total_weight, 1)


def score_for(modality_scores: list[ModalityReading], modality: str) -> float | None:
    for m in modality_scores:
        if m.modality == modality:
            return as_number(m.score)
    return None
