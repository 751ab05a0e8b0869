"""
AVTRACK Server

MCP server providing tools for assessing AV conduction from extracted ECG wave
events.
"""

import json
import logging

from typing import Any

from mcp.server.fastmcp import FastMCP

from avtrack.analysis.service import AnalysisService
from avtrack.analysis.summaries import generate_conduction_summary
from avtrack.analysis.thresholds import (
    DEFAULT_THRESHOLDS,
    THRESHOLD_NAMES,
    DetectorThresholds,
)
from avtrack.config import load_thresholds
from avtrack.constants import RECOMMENDED_ACTIONS
from avtrack.parsers.events import InvalidInputShape

logger = logging.getLogger(__name__)

INSTRUCTIONS = """
AVTRACK
AV conduction tracking for extracted ECG wave events

You are the AVTRACK server. You classify atrioventricular conduction from P wave
and QRS complex timings that an upstream extractor has already located on an
ECG strip. You do not read images or raw signals.

IMPORTANT NOTES:
- All times are in milliseconds from the start of the strip
- Each event needs at least a time; amplitude, duration, onset slope and peak
  sharpness are optional and only affect morphology and quality checks
- Fewer than 2 events in both series yields a low-confidence NORMAL result
  with "insufficient data" in the evidence
- Results support, but never replace, clinical review

AVAILABLE TOOLS:
- assess_conduction: Full structured result (classification, urgency,
  confidence, evidence, rates, morphology findings, component quality)
- summarize_conduction: Short human-readable summary of the same analysis

WORKFLOW:
1. Pass pWaves and qrsComplexes (and tWaves if available) to assess_conduction
2. Check urgency first: EMERGENT means complete heart block was detected
3. Review morphologyFindings; reclassified QRS components may skew the
   ventricular rate
4. Use summarize_conduction when a one-paragraph explanation is enough

CLINICAL CONTEXT:
- Normal PR interval: 120-300 ms as used for P-QRS consistency
- Complete heart block: atrial and ventricular rates differ by >20 bpm, PR
  intervals are inconsistent and both rhythms are regular
- Rate difference >10 bpm without full dissociation suggests partial block
"""

server = FastMCP(name="avtrack", instructions=INSTRUCTIONS)


def _build_payload(
    p_waves: list[dict[str, Any]],
    qrs_complexes: list[dict[str, Any]],
    t_waves: list[dict[str, Any]] | None,
    components: list[dict[str, Any]] | None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {"pWaves": p_waves, "qrsComplexes": qrs_complexes}
    if t_waves is not None:
        payload["tWaves"] = t_waves
    if components is not None:
        payload["components"] = components
    return payload


# ============================================================================
# Resources (Documentation)
# ============================================================================


@server.resource("docs://thresholds")
def get_thresholds_documentation() -> str:
    """Active detector thresholds and classification rules."""
    thresholds = load_thresholds()
    return json.dumps(
        {
            "description": "Detector thresholds used for conduction classification",
            "thresholds": {
                name: {
                    "value": getattr(thresholds, name),
                    "default": getattr(DEFAULT_THRESHOLDS, name),
                    "description": DetectorThresholds.model_fields[name].description,
                }
                for name in THRESHOLD_NAMES
            },
            "classifications": {
                "COMPLETE_HEART_BLOCK": (
                    "rate difference > complete_block_rate_diff_bpm, AV "
                    "dissociation and independent regular rhythms"
                ),
                "SECOND_DEGREE": "rate difference > partial_block_rate_diff_bpm",
                "NORMAL": "otherwise",
            },
            "recommended_actions": {
                urgency.value: action for urgency, action in RECOMMENDED_ACTIONS.items()
            },
        },
        indent=2,
    )


# ============================================================================
# Tools (Actions)
# ============================================================================


@server.tool("assess_conduction")
def assess_conduction(
    *,
    p_waves: list[dict[str, Any]],
    qrs_complexes: list[dict[str, Any]],
    t_waves: list[dict[str, Any]] | None = None,
    components: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """
    Assess AV conduction from extracted wave events.

    Each event is an object with timeMs (required) and optional amplitudeMv,
    durationMs, onsetSlope and peakSharpness.

    Args:
        p_waves: P wave events
        qrs_complexes: QRS complex events
        t_waves: T wave events (optional)
        components: Components to check for QRS/T confusion, each with a kind
            of P, QRS or T (defaults to QRS complexes followed by T waves)

    Returns:
        Classification, urgency, confidence, evidence, rate profiles,
        morphology findings and component quality
    """
    try:
        service = AnalysisService.from_config()
        result = service.analyze(
            _build_payload(p_waves, qrs_complexes, t_waves, components)
        )
        return result.to_dict()

    except InvalidInputShape as e:
        logger.warning(f"Rejected conduction payload: {e}")
        raise ValueError(f"Invalid input: {e}") from e
    except Exception as e:
        logger.error(f"Error assessing conduction: {e}", exc_info=True)
        raise ValueError(f"Error assessing conduction: {e}") from e


@server.tool("summarize_conduction")
def summarize_conduction(
    *,
    p_waves: list[dict[str, Any]],
    qrs_complexes: list[dict[str, Any]],
    t_waves: list[dict[str, Any]] | None = None,
) -> str:
    """
    Summarize AV conduction from extracted wave events in plain text.

    Args:
        p_waves: P wave events
        qrs_complexes: QRS complex events
        t_waves: T wave events (optional)

    Returns:
        Summary text with classification, rates and recommended action
    """
    try:
        service = AnalysisService.from_config()
        result = service.analyze(
            _build_payload(p_waves, qrs_complexes, t_waves, None)
        )
        return generate_conduction_summary(result)

    except InvalidInputShape as e:
        logger.warning(f"Rejected conduction payload: {e}")
        raise ValueError(f"Invalid input: {e}") from e
    except Exception as e:
        logger.error(f"Error summarizing conduction: {e}", exc_info=True)
        raise ValueError(f"Error summarizing conduction: {e}") from e
