"""
consistency.py: Multimodal consistency check.

Compares the visual and audio modality scores of an analysis and turns
their disagreement into a confidence penalty. It only reads scores; the
trust score itself is never modified, an adjusted copy is returned.

    d = |visual/100 − audio/100|

    d ≥ 0.30          → inconsistent          −15
    0.15 ≤ d < 0.30   → partially_consistent   −7
    d < 0.15          → consistent              0
    image / no audio  → single_modality         0

USAGE
─────
    from deeptrust.services.consistency import compute_consistency_check

    result = compute_consistency_check(80, "video", modality_scores)
    # result.consistency_status  → "inconsistent"
    # result.adjusted_confidence → 65
"""

from __future__ import annotations

from deeptrust.models.analysis import ConsistencyResult, ModalityReading
from deeptrust.services.coerce import clamp
from deeptrust.services.fusion import score_for

LOW_DISAGREEMENT = 0.15
HIGH_DISAGREEMENT = 0.30

_BANDS = [
    # (minimum disagreement, status, confidence modifier)
    (HIGH_DISAGREEMENT, "inconsistent", -15),
    (LOW_DISAGREEMENT, "partially_consistent", -7),
]

_EXPLANATIONS = {
    "inconsistent": (
        "Audio and visual signals show conflicting authenticity patterns. The system detected "
        "significant disagreement between what it sees and hears, requiring cautious interpretation."
    ),
    "partially_consistent": (
        "Audio and visual signals show some variation. Minor disagreement detected; the result "
        "remains valid but with reduced confidence."
    ),
    "consistent": (
        "Audio and visual signals agree. Both modalities support the same authenticity conclusion."
    ),
    "single_modality": "Single modality analysis; consistency check not applicable.",
}


def classify_disagreement(disagreement: float) -> tuple[str, int]:
    """Map a disagreement in [0, 1] to (status, confidence modifier); below every band is consistent."""
    for minimum, status, modifier in _BANDS:
        if disagreement >= minimum:
            return status, modifier
    return "consistent", 0


def compute_consistency_check(
    trust_score: float,
    media_type: str,
    modality_scores: list[ModalityReading] | None = None,
) -> ConsistencyResult:
    """
    Run the consistency check for one analysis.

    The visual score falls back to the trust score when no visual modality
    was reported; a missing audio score means there is nothing to compare.
    """
    modality_scores = modality_scores or []
    visual = score_for(modality_scores, "visual")
    visual = trust_score if visual is None else visual
    audio = score_for(modality_scores, "audio")

    if audio is None or media_type == "image":
        return ConsistencyResult(
            consistency_status="single_modality",
            visual_score=visual,
            audio_score=None,
            disagreement=0.0,
            confidence_modifier=0,
            adjusted_confidence=clamp(trust_score, 0, 100),
            explanation=_EXPLANATIONS["single_modality"],
        )

    # Difference first, then normalise: 35 vs 20 must land exactly on 0.15.
    disagreement = round(abs(visual - audio) / 100, 6)
    status, modifier = classify_disagreement(disagreement)

    return ConsistencyResult(
        consistency_status=status,
        visual_score=visual,
        audio_score=audio,
        disagreement=disagreement,
        confidence_modifier=modifier,
        adjusted_confidence=clamp(trust_score + modifier, 0, 100),
        explanation=_EXPLANATIONS[status],
    )
