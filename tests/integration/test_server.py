"""
Tests for the MCP server tools and resources.

Tool functions are called directly; FastMCP registration leaves them plain
callables.
"""

import json

import pytest

from avtrack.config import set_threshold
from avtrack.server import (
    assess_conduction,
    get_thresholds_documentation,
    server,
    summarize_conduction,
)
from tests.helpers.synthetic_data import (
    complete_heart_block_payload,
    normal_sinus_payload,
)


class TestAssessConduction:
    def test_complete_heart_block(self):
        payload = complete_heart_block_payload()

        data = assess_conduction(
            p_waves=payload["pWaves"], qrs_complexes=payload["qrsComplexes"]
        )

        assert data["classification"] == "COMPLETE_HEART_BLOCK"
        assert data["urgency"] == "EMERGENT"
        assert data["recommendedAction"] == "IMMEDIATE CARDIOLOGY CONSULTATION"
        json.dumps(data)

    def test_with_t_waves_and_components(self):
        payload = normal_sinus_payload()

        data = assess_conduction(
            p_waves=payload["pWaves"],
            qrs_complexes=payload["qrsComplexes"],
            t_waves=[{"timeMs": 400.0, "peakSharpness": 0.2}],
            components=[{"timeMs": 160.0, "kind": "QRS", "onsetSlope": 0.1}],
        )

        assert data["classification"] == "NORMAL"
        assert len(data["morphology"]["findings"]) == 1
        assert data["componentQuality"]["tWaves"]["componentCount"] == 1

    def test_invalid_input(self):
        with pytest.raises(ValueError, match="Invalid input"):
            assess_conduction(p_waves=[{"timeMs": "later"}], qrs_complexes=[])

    def test_honours_configured_thresholds(self):
        set_threshold("complete_block_rate_diff_bpm", 40)
        payload = complete_heart_block_payload()

        data = assess_conduction(
            p_waves=payload["pWaves"], qrs_complexes=payload["qrsComplexes"]
        )

        assert data["classification"] == "SECOND_DEGREE"


class TestSummarizeConduction:
    def test_summary_text(self):
        payload = normal_sinus_payload()

        summary = summarize_conduction(
            p_waves=payload["pWaves"], qrs_complexes=payload["qrsComplexes"]
        )

        assert summary.startswith("Classification: normal AV conduction")

    def test_invalid_input(self):
        with pytest.raises(ValueError, match="Invalid input"):
            summarize_conduction(p_waves=[1, 2, 3], qrs_complexes=[])


class TestThresholdsResource:
    def test_defaults(self):
        doc = json.loads(get_thresholds_documentation())

        ratio = doc["thresholds"]["dissociation_consistency_ratio"]
        assert ratio["value"] == 0.7
        assert ratio["default"] == 0.7
        assert ratio["description"]
        assert doc["recommended_actions"]["EMERGENT"] == (
            "IMMEDIATE CARDIOLOGY CONSULTATION"
        )

    def test_reflects_overrides(self):
        set_threshold("partial_block_rate_diff_bpm", 12)

        doc = json.loads(get_thresholds_documentation())

        entry = doc["thresholds"]["partial_block_rate_diff_bpm"]
        assert entry["value"] == 12
        assert entry["default"] == 10


def test_server_name():
    assert server.name == "avtrack"
