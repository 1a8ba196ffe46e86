"""
test_result_builder.py: Unit tests for reshaping model JSON into an AnalysisResult.

Run:
    pytest tests/test_result_builder.py -v
"""

import pytest

from deeptrust.services.result_builder import (
    build_analysis_result,
    build_audio_anomalies,
    build_frame_analysis,
    build_heatmap_regions,
    build_observations,
    build_robustness_tests,
    compute_edge_connections,
    compute_risk_level,
)


# ── Defaults ──────────────────────────────────────────────────────────────────

class TestEmptyReply:

    @pytest.fixture()
    def result(self):
        return build_analysis_result({}, "image", 1.234)

    def test_headline_defaults(self, result):
        assert result.trust_score == 50
        assert result.risk_level == "medium"
        assert result.verdict == "Analysis Complete"
        assert result.analysis_time == 1.2
        assert result.observations == []

    def test_robustness_baseline_defaults_to_85(self, result):
        confidences = [t.confidence for t in result.robustness_tests]
        assert confidences == [85, 80, 77, 67, 78]
        assert [t.drift for t in result.robustness_tests] == [0, -5, -8, -18, -7]
        assert [t.status for t in result.robustness_tests] == ["pass", "pass", "pass", "warning", "pass"]

    def test_graph_defaults(self, result):
        stats = result.graph_stats
        assert (stats.keypoints_detected, stats.edge_connections) == (24, 38)
        assert (stats.suspicious_nodes, stats.graph_coherence) == (0, 90)

    def test_fusion_and_consistency_present(self, result):
        assert result.fused_score == 50
        assert result.consistency.consistency_status == "single_modality"


# ── Zero is a real value ──────────────────────────────────────────────────────

class TestZeroValuesKept:

    def test_zero_trust_score(self):
        result = build_analysis_result({"trustScore": 0}, "image", 0)
        assert result.trust_score == 0
        assert result.risk_level == "high"

    def test_zero_keypoints_and_drift(self):
        data = {
            "graphStats": {"keypointsDetected": 0, "graphCoherence": 0},
            "robustnessAnalysis": {"cleanConfidence": 0, "compressionResilience": 0},
        }
        result = build_analysis_result(data, "image", 0)
        assert result.graph_stats.edge_connections == 0
        assert result.graph_stats.graph_coherence == 0
        compressed = result.robustness_tests[1]
        assert compressed.drift == 0
        assert compressed.confidence == 40
        assert result.robustness_tests[0].confidence == 0


# ── Coercion & clamping ───────────────────────────────────────────────────────

class TestCoercion:

    @pytest.mark.parametrize(("raw", "expected"), [(150, 100), (-10, 0), ("72", 72), ("n/a", 50), (True, 50), (None, 50)])
    def test_trust_score(self, raw, expected):
        assert build_analysis_result({"trustScore": raw}, "image", 0).trust_score == expected

    def test_blank_verdict_defaults(self):
        assert build_analysis_result({"verdict": "   "}, "image", 0).verdict == "Analysis Complete"

    def test_non_dict_sections_ignored(self):
        data = {"graphStats": [1, 2], "robustnessAnalysis": "high", "observations": {"a": 1}}
        result = build_analysis_result(data, "video", 0)
        assert result.graph_stats.keypoints_detected == 24
        assert len(result.robustness_tests) == 5
        assert result.observations == []


class TestRiskLevel:

    @pytest.mark.parametrize(
        ("score", "level"),
        [(100, "low"), (70, "low"), (69.9, "medium"), (40, "medium"), (39.9, "high"), (0, "high")],
    )
    def test_thresholds(self, score, level):
        assert compute_risk_level(score) == level


def test_edge_connections_floor():
    assert compute_edge_connections(24) == 38
    assert compute_edge_connections(28) == 44
    assert compute_edge_connections(5) == 8


# ── Robustness ────────────────────────────────────────────────────────────────

class TestRobustness:

    def test_clean_confidence_falls_back_to_trust(self):
        tests = build_robustness_tests({}, 64)
        assert tests[0].confidence == 64
        assert tests[3].confidence == 46

    def test_confidence_floored_at_40(self):
        tests = build_robustness_tests({"cleanConfidence": 45, "motionSensitivity": -30}, None)
        assert tests[3].confidence == 40

    @pytest.mark.parametrize(
        ("key", "index", "passing", "failing"),
        [
            ("compressionResilience", 1, -10, -10.5),
            ("degradationResilience", 2, -12, -13),
            ("motionSensitivity", 3, -15, -16),
            ("noiseTolerance", 4, -10, -11),
        ],
    )
    def test_drift_tolerance(self, key, index, passing, failing):
        assert build_robustness_tests({key: passing}, 80)[index].status == "pass"
        assert build_robustness_tests({key: failing}, 80)[index].status == "warning"

    def test_positive_drift_uses_magnitude(self):
        assert build_robustness_tests({"noiseTolerance": 12}, 80)[4].status == "warning"


# ── List sections ─────────────────────────────────────────────────────────────

class TestObservations:

    def test_capped_at_five(self):
        raw = [{"type": "concern", "title": f"t{i}", "description": "d"} for i in range(8)]
        assert len(build_observations(raw)) == 5

    def test_per_field_defaults(self):
        obs = build_observations([{"type": "alarming"}, "text"])
        assert [(o.type, o.title, o.description) for o in obs] == [
            ("neutral", "Observation", ""),
            ("neutral", "Observation", ""),
        ]


class TestHeatmapRegions:

    def test_clamped_and_defaulted(self):
        region = build_heatmap_regions([{"x": 1.4, "y": -0.2, "intensity": 0.9, "label": ""}, 7])[0]
        assert (region.x, region.y, region.radius, region.intensity) == (1, 0, 0.1, 0.9)
        assert region.label is None


class TestAudioAnomalies:

    def test_reversed_span_sorted_and_bad_severity_defaulted(self):
        anomaly = build_audio_anomalies([{"start": 4.0, "end": 2.5, "severity": "extreme"}])[0]
        assert (anomaly.start, anomaly.end, anomaly.severity) == (2.5, 4.0, "medium")

    def test_incomplete_span_dropped(self):
        assert build_audio_anomalies([{"start": 1.0}, {"end": 2.0}]) == []

    def test_dropped_for_images(self):
        data = {"audioAnomalies": [{"start": 0, "end": 1, "severity": "high"}]}
        assert build_analysis_result(data, "image", 0).audio_anomalies == []
        assert len(build_analysis_result(data, "audio", 0).audio_anomalies) == 1


class TestFrameAnalysis:

    def test_sorted_by_frame_number(self):
        frames = build_frame_analysis([
            {"frameNumber": 20, "timestamp": 0.8, "confidence": 70},
            {"frameNumber": 5, "timestamp": 0.2, "confidence": 90, "anomalyType": "edge_artifact"},
        ])
        assert [f.frame_number for f in frames] == [5, 20]
        assert frames[0].anomaly_type == "edge_artifact"
        assert frames[1].anomaly_type is None

    def test_missing_confidence_dropped_and_index_used(self):
        frames = build_frame_analysis([{"frameNumber": 1}, {"confidence": 140}])
        assert len(frames) == 1
        assert frames[0].frame_number == 1
        assert frames[0].confidence == 100

    def test_only_kept_for_video(self):
        data = {"frameAnalysis": [{"frameNumber": 0, "timestamp": 0, "confidence": 80}]}
        assert build_analysis_result(data, "audio", 0).frame_analysis == []
        assert len(build_analysis_result(data, "video", 0).frame_analysis) == 1


# ── Serialisation ─────────────────────────────────────────────────────────────

def test_dump_uses_camel_case():
    dumped = build_analysis_result({"trustScore": 91}, "video", 0).model_dump(by_alias=True)
    assert dumped["trustScore"] == 91
    assert dumped["riskLevel"] == "low"
    assert "edgeConnections" in dumped["graphStats"]
    assert "adjustedConfidence" in dumped["consistency"]


# ── Consistency only sees reported modalities ─────────────────────────────────

class TestConsistencyInputs:

    def test_video_without_modality_scores_is_single_modality(self):
        result = build_analysis_result({"trustScore": 80}, "video", 0.1)
        assert [m.modality for m in result.modality_scores] == ["visual", "structural", "audio", "temporal"]
        assert result.consistency.consistency_status == "single_modality"
        assert result.consistency.confidence_modifier == 0
        assert result.consistency.audio_score is None
        assert result.consistency.adjusted_confidence == 80

    def test_audio_without_audio_entry_is_single_modality(self):
        data = {"trustScore": 60, "modalityScores": [{"modality": "visual", "score": 95}]}
        result = build_analysis_result(data, "audio", 0.1)
        assert result.modality_scores[2].modality == "audio"
        assert result.consistency.consistency_status == "single_modality"
        assert result.consistency.visual_score == 95
        assert result.consistency.confidence_modifier == 0

    def test_reported_audio_compared_against_trust_when_visual_missing(self):
        data = {"trustScore": 90, "modalityScores": [{"modality": "audio", "score": 50}]}
        result = build_analysis_result(data, "video", 0.1)
        assert result.consistency.consistency_status == "inconsistent"
        assert result.consistency.visual_score == 90
        assert result.consistency.adjusted_confidence == 75
