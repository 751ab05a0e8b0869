"""
End-to-end tests for the conduction analysis pipeline.

These tests run extractor payloads through parsing, rate tracking, morphology
validation, classification and quality checks, and verify the serialized
output contract.
"""

import json

import pytest

from avtrack.analysis.service import AnalysisService
from avtrack.analysis.thresholds import DetectorThresholds
from avtrack.analysis.types import WaveEvent
from avtrack.config import set_threshold
from avtrack.constants import ConductionClass, Urgency, WaveKind
from avtrack.parsers.events import InvalidInputShape
from tests.helpers.synthetic_data import (
    build_payload,
    complete_heart_block_payload,
    generate_series,
    generate_times,
    normal_sinus_payload,
)

pytestmark = pytest.mark.integration_pipeline

OUTPUT_KEYS = {
    "classification",
    "urgency",
    "confidence",
    "evidence",
    "avDissociation",
    "rateDifferenceBpm",
    "recommendedAction",
    "morphology",
    "atrial",
    "ventricular",
    "qrsWidthMs",
    "qrsMorphology",
    "componentQuality",
    "processingTimeMs",
}


@pytest.fixture
def service():
    return AnalysisService()


class TestScenarios:
    """Representative rhythms through the full pipeline."""

    def test_normal_sinus_rhythm(self, service):
        result = service.analyze(normal_sinus_payload())

        assert result.assessment.classification == ConductionClass.NORMAL
        assert result.assessment.urgency == Urgency.ROUTINE
        assert result.assessment.confidence == pytest.approx(0.90)
        assert result.atrial.rate_bpm == 70
        assert result.ventricular.rate_bpm == 70
        assert result.morphology.is_valid
        assert result.morphology.confidence == pytest.approx(0.9)
        assert result.qrs_morphology == "Normal narrow QRS complexes"

    def test_complete_heart_block(self, service):
        result = service.analyze(complete_heart_block_payload())

        assessment = result.assessment
        assert assessment.classification == ConductionClass.COMPLETE_HEART_BLOCK
        assert assessment.urgency == Urgency.EMERGENT
        assert assessment.confidence == pytest.approx(0.95)
        assert assessment.av_dissociation is True
        assert result.atrial.rate_bpm == 70
        assert result.ventricular.rate_bpm == 40

    def test_t_wave_misread_as_qrs(self, service):
        payload = normal_sinus_payload()
        payload["qrsComplexes"].append(
            {
                "timeMs": 1200.0,
                "durationMs": 180.0,
                "onsetSlope": 0.2,
                "peakSharpness": 0.1,
            }
        )

        result = service.analyze(payload)

        reclassified = result.morphology.reclassifications
        assert len(reclassified) == 1
        assert reclassified[0].event.time_ms == 1200.0
        assert reclassified[0].reclassify_as == WaveKind.T
        assert not result.morphology.is_valid
        assert result.morphology.confidence < 0.9

    def test_empty_payload(self, service):
        result = service.analyze({"pWaves": [], "qrsComplexes": []})

        assert result.assessment.classification == ConductionClass.NORMAL
        assert result.assessment.confidence == pytest.approx(0.5)
        assert "insufficient data" in result.assessment.evidence
        assert result.morphology.confidence == 0.5
        assert result.qrs_width_ms == 0.0

    def test_wide_qrs(self, service):
        payload = build_payload(generate_times(1000.0, 5), generate_times(1000.0, 5))
        for event in payload["qrsComplexes"]:
            event["durationMs"] = 140.0

        result = service.analyze(payload)

        assert result.qrs_width_ms == pytest.approx(140.0)
        assert result.qrs_morphology == "Wide QRS complexes"
        assert result.component_quality.qrs_complexes.issues

    def test_explicit_components(self, service):
        payload = normal_sinus_payload()
        payload["components"] = [
            {"timeMs": 160.0, "kind": "QRS", "onsetSlope": 0.1},
            {"timeMs": 400.0, "type": "T", "peakSharpness": 0.1},
        ]

        result = service.analyze(payload)

        assert len(result.morphology.findings) == 1
        assert result.morphology.confidence == pytest.approx(0.75)


class TestServiceBehaviour:
    def test_analyze_series_matches_payload(self, service):
        p_series = generate_series(WaveKind.P, 857.0, 4)
        qrs_series = generate_series(WaveKind.QRS, 857.0, 4, start_ms=160.0)

        direct = service.analyze_series(p_series, qrs_series)
        parsed = service.analyze(
            build_payload(generate_times(857.0, 4), generate_times(857.0, 4, 160.0))
        )

        assert direct.to_dict(include_timing=False) == parsed.to_dict(
            include_timing=False
        )

    def test_idempotent(self, service):
        payload = complete_heart_block_payload()

        first = service.analyze(payload).to_dict(include_timing=False)
        second = service.analyze(payload).to_dict(include_timing=False)

        assert first == second

    def test_input_order_irrelevant(self, service):
        payload = complete_heart_block_payload()
        shuffled = {key: list(reversed(events)) for key, events in payload.items()}

        expected = service.analyze(payload).to_dict(include_timing=False)

        assert service.analyze(shuffled).to_dict(include_timing=False) == expected

    def test_custom_thresholds(self):
        strict = AnalysisService(
            thresholds=DetectorThresholds(complete_block_rate_diff_bpm=40)
        )

        result = strict.analyze(complete_heart_block_payload())

        assert result.assessment.classification == ConductionClass.SECOND_DEGREE

    def test_from_config(self):
        set_threshold("complete_block_rate_diff_bpm", 40)

        result = AnalysisService.from_config().analyze(complete_heart_block_payload())

        assert result.assessment.classification == ConductionClass.SECOND_DEGREE

    def test_rejects_malformed_payload(self, service):
        with pytest.raises(InvalidInputShape):
            service.analyze({"pWaves": [{"timeMs": "soon"}]})

    def test_rejects_untyped_series(self, service):
        with pytest.raises(InvalidInputShape):
            service.analyze_series([{"timeMs": 0.0}], [])

    def test_accepts_tuples(self, service):
        p_series = tuple(generate_series(WaveKind.P, 800.0, 3))

        result = service.analyze_series(p_series, ())

        assert result.atrial.count == 3
        assert isinstance(result.morphology.findings, list)


class TestOutputContract:
    def test_keys(self, service):
        data = service.analyze(normal_sinus_payload()).to_dict()

        assert set(data) == OUTPUT_KEYS
        assert data["processingTimeMs"] >= 0

    def test_timing_optional(self, service):
        data = service.analyze(normal_sinus_payload()).to_dict(include_timing=False)

        assert "processingTimeMs" not in data

    def test_json_serializable(self, service):
        payload = normal_sinus_payload()
        payload["qrsComplexes"][1].update({"durationMs": 180.0, "onsetSlope": 0.2})

        data = json.loads(json.dumps(service.analyze(payload).to_dict()))

        assert data["classification"] == "NORMAL"
        assert data["urgency"] == "ROUTINE"
        assert data["morphology"]["isValid"] is False
        finding = data["morphology"]["findings"][0]
        assert finding["reclassifyAs"] == "T"
        assert finding["event"]["timeMs"] == 1017.0
        assert data["atrial"]["rateBpm"] == 70
        assert data["atrial"]["regularity"] == "REGULAR"
        assert data["componentQuality"]["qrsComplexes"]["kind"] == "QRS"
        assert data["componentQuality"]["allIssues"]

    def test_complete_block_contract(self, service):
        data = service.analyze(complete_heart_block_payload()).to_dict()

        assert data["avDissociation"] is True
        assert data["rateDifferenceBpm"] == 30
        assert data["recommendedAction"] == "IMMEDIATE CARDIOLOGY CONSULTATION"
        assert "COMPLETE HEART BLOCK DETECTED" in data["evidence"]


def test_wave_event_round_trip_through_contract(service):
    event = WaveEvent(time_ms=12.5, kind=WaveKind.QRS, onset_slope=0.1)

    result = service.analyze_series([], [event])

    finding = result.to_dict()["morphology"]["findings"][0]
    assert WaveEvent.model_validate(finding["event"]) == event
