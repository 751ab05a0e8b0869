"""
Analysis service for orchestrating conduction analysis.

This module provides the main interface for running a complete analysis over
an extractor payload: parsing, rate tracking, morphology validation,
conduction classification and component quality checks.
"""

import logging
import time

from collections.abc import Sequence
from typing import Any

from avtrack.analysis.component_tracker import ComponentTracker
from avtrack.analysis.heart_block import HeartBlockDetector
from avtrack.analysis.morphology import MorphologyValidator
from avtrack.analysis.quality import ComponentQualityValidator
from avtrack.analysis.thresholds import DEFAULT_THRESHOLDS, DetectorThresholds
from avtrack.analysis.types import AnalysisResult, WaveEvent
from avtrack.config import load_thresholds
from avtrack.parsers.events import ensure_event_list, parse_payload

logger = logging.getLogger(__name__)

__all__ = ["AnalysisService", "AnalysisResult"]


class AnalysisService:
    """
    Service for running conduction analysis on extracted wave events.

    Holds no per-call state; one instance can serve concurrent callers.

    Example:
        >>> service = AnalysisService()
        >>> result = service.analyze({"pWaves": [...], "qrsComplexes": [...]})
        >>> print(result.assessment.classification.value)
    """

    def __init__(self, thresholds: DetectorThresholds = DEFAULT_THRESHOLDS):
        """
        Initialize analysis service.

        Args:
            thresholds: Detector thresholds (defaults to built-in constants)
        """
        self.thresholds = thresholds
        self.tracker = ComponentTracker(
            regularity_variance_ratio=thresholds.p_regularity_variance_ratio
        )
        self.morphology_validator = MorphologyValidator()
        self.detector = HeartBlockDetector(thresholds=thresholds, tracker=self.tracker)
        self.quality_validator = ComponentQualityValidator(
            morphology_validator=self.morphology_validator
        )

    @classmethod
    def from_config(cls) -> "AnalysisService":
        """Create a service using threshold overrides from the config file."""
        return cls(thresholds=load_thresholds())

    def analyze(self, payload: Any) -> AnalysisResult:
        """
        Analyze an extractor payload.

        Args:
            payload: JSON-compatible object (see parsers.events.parse_payload)

        Returns:
            AnalysisResult for the payload

        Raises:
            InvalidInputShape: If the payload is structurally malformed
        """
        parsed = parse_payload(payload)
        return self.analyze_series(
            p_waves=parsed.p_waves,
            qrs_complexes=parsed.qrs_complexes,
            t_waves=parsed.t_waves,
            components=parsed.morphology_components,
        )

    def analyze_series(
        self,
        p_waves: Sequence[WaveEvent],
        qrs_complexes: Sequence[WaveEvent],
        t_waves: Sequence[WaveEvent] | None = None,
        components: Sequence[WaveEvent] | None = None,
    ) -> AnalysisResult:
        """
        Analyze already-typed event series.

        Args:
            p_waves: P wave events
            qrs_complexes: QRS complex events
            t_waves: T wave events (optional)
            components: Components for morphology validation; defaults to
                QRS complexes followed by T waves

        Returns:
            AnalysisResult

        Raises:
            InvalidInputShape: If any series is not a list of WaveEvent
        """
        start_time = time.perf_counter()

        p_events = ensure_event_list(p_waves, "p_waves")
        qrs_events = ensure_event_list(qrs_complexes, "qrs_complexes")
        t_events = ensure_event_list(t_waves or [], "t_waves")
        if components is None:
            morphology_events = [*qrs_events, *t_events]
        else:
            morphology_events = ensure_event_list(components, "components")

        logger.info(
            f"Starting conduction analysis: {len(p_events)} P waves, "
            f"{len(qrs_events)} QRS complexes, {len(t_events)} T waves"
        )

        # Rate tracking
        atrial = self.tracker.compute_rate_profile(p_events)
        ventricular = self.tracker.compute_rate_profile(qrs_events)
        logger.info(
            f"Atrial rate {atrial.rate_bpm} bpm ({atrial.regularity.value}), "
            f"ventricular rate {ventricular.rate_bpm} bpm "
            f"({ventricular.regularity.value})"
        )

        # QRS vs T morphology
        morphology = self.morphology_validator.validate(morphology_events)

        # AV conduction
        assessment = self.detector.assess(atrial, p_events, ventricular, qrs_events)

        quality = self.quality_validator.generate_report(
            p_events, qrs_events, t_events
        )

        processing_time_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Conduction analysis complete: {assessment.classification.value} "
            f"({assessment.urgency.value}, confidence {assessment.confidence:.2f}) "
            f"in {processing_time_ms:.1f}ms"
        )

        return AnalysisResult(
            assessment=assessment,
            morphology=morphology,
            atrial=atrial,
            ventricular=ventricular,
            qrs_width_ms=self.tracker.measure_qrs_width(qrs_events),
            qrs_morphology=self.tracker.describe_qrs_morphology(qrs_events),
            component_quality=quality,
            processing_time_ms=processing_time_ms,
        )
