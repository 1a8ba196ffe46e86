"""
test_fusion.py: Unit tests for static weighted multimodal fusion.
"""

import pytest

from deeptrust.models.analysis import ModalityScore
from deeptrust.services.fusion import (
    MODALITY_WEIGHTS,
    applicable_modalities,
    build_modality_scores,
    compute_fused_score,
    supplied_modalities,
)


class TestApplicableModalities:

    def test_image(self):
        assert applicable_modalities("image") == ("visual", "structural")

    def test_audio(self):
        assert applicable_modalities("audio") == ("visual", "structural", "audio")

    def test_video(self):
        assert applicable_modalities("video") == ("visual", "structural", "audio", "temporal")

    def test_unknown_treated_as_image(self):
        assert applicable_modalities("hologram") == ("visual", "structural")


class TestBuildModalityScores:

    def test_defaults_filled_from_trust_score(self):
        scores = build_modality_scores(None, "video", 82)
        assert [m.score for m in scores] == [82, 82, 82, 82]
        assert [m.weight for m in scores] == [0.35, 0.25, 0.20, 0.20]
        assert scores[0].findings[0] == "Natural lighting patterns"

    def test_low_trust_gets_suspicious_findings(self):
        scores = build_modality_scores([], "image", 70)
        assert "Unusual smoothness detected" in scores[0].findings

    def test_model_scores_and_weight_used(self):
        raw = [{"modality": "Visual", "score": 40, "weight": 0.9, "confidence": 77, "findings": ["Halo", 3, ""]}]
        visual = build_modality_scores(raw, "image", 90)[0]
        assert visual.score == 40
        assert visual.weight == 0.9
        assert visual.confidence == 77
        assert visual.findings == ["Halo"]

    @pytest.mark.parametrize("weight, expected", [
        (None, MODALITY_WEIGHTS["structural"]),
        ("heavy", MODALITY_WEIGHTS["structural"]),
        (0, 0),
        (3, 1),
        (-1, 0),
    ])
    def test_weight_defaulted_and_clamped(self, weight, expected):
        raw = [{"modality": "structural", "score": 50, "weight": weight}]
        structural = build_modality_scores(raw, "image", 90)[1]
        assert structural.weight == expected

    def test_inapplicable_and_unknown_dropped(self):
        raw = [
            {"modality": "temporal", "score": 10},
            {"modality": "smell", "score": 10},
            "garbage",
        ]
        scores = build_modality_scores(raw, "image", 60)
        assert [m.modality for m in scores] == ["visual", "structural"]
        assert all(m.score == 60 for m in scores)

    def test_first_duplicate_wins(self):
        raw = [{"modality": "audio", "score": 30}, {"modality": "audio", "score": 90}]
        audio = build_modality_scores(raw, "audio", 60)[2]
        assert audio.score == 30

    def test_zero_score_kept_and_out_of_range_clamped(self):
        raw = [{"modality": "visual", "score": 0}, {"modality": "structural", "score": 180}]
        visual, structural = build_modality_scores(raw, "image", 60)
        assert visual.score == 0
        assert structural.score == 100


class TestFusedScore:

    def test_weighted_mean(self):
        scores = [
            ModalityScore(modality="visual", score=100, weight=0.35, confidence=90),
            ModalityScore(modality="structural", score=60, weight=0.25, confidence=90),
        ]
        assert compute_fused_score(scores, 0) == pytest.approx((100 * 0.35 + 60 * 0.25) / 0.6, abs=0.05)

    def test_uniform_scores(self):
        assert compute_fused_score(build_modality_scores(None, "video", 80), 0) == 80

    def test_empty_falls_back(self):
        assert compute_fused_score([], 42) == 42

    def test_supplied_weight_shifts_mean(self):
        raw = [{"modality": "visual", "score": 100, "weight": 0.75}, {"modality": "structural", "score": 0}]
        scores = build_modality_scores(raw, "image", 50)
        assert compute_fused_score(scores, 0) == 75


class TestSuppliedModalities:

    def test_only_model_entries_returned(self):
        raw = [{"modality": " AUDIO ", "score": 30}, {"modality": "audio", "score": 90}, {"modality": "smell"}, 7]
        supplied = supplied_modalities(raw)
        assert list(supplied) == ["audio"]
        assert supplied["audio"]["score"] == 30

    def test_missing_list_is_empty(self):
        assert supplied_modalities(None) == {}
