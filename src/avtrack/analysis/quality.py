"""
Plausibility checks for extracted wave components.

Scores how believable the extractor's P, QRS and T identifications are.
Some findings lower the accuracy score (likely misidentification); others
are clinical observations reported without penalty.
"""

import logging

from collections.abc import Sequence

import numpy as np

from avtrack.analysis.morphology import MorphologyValidator
from avtrack.analysis.types import (
    ComponentQualityReport,
    QualityCheck,
    QualityScore,
    WaveEvent,
)
from avtrack.constants import ComponentQualityConstants as CQC
from avtrack.constants import WaveKind
from avtrack.parsers.events import ensure_event_list

logger = logging.getLogger(__name__)

__all__ = ["ComponentQualityValidator", "ComponentQualityReport", "grade_accuracy"]


def grade_accuracy(accuracy: float) -> QualityScore:
    """
    Grade an accuracy score.

    Args:
        accuracy: Accuracy in [0, 1]

    Returns:
        "excellent" above 0.9, "good" above 0.8, otherwise "needs_improvement"
    """
    if accuracy > CQC.EXCELLENT_THRESHOLD:
        return "excellent"
    if accuracy > CQC.GOOD_THRESHOLD:
        return "good"
    return "needs_improvement"


class ComponentQualityValidator:
    """
    Validates component identifications per wave type.

    Example:
        >>> validator = ComponentQualityValidator()
        >>> report = validator.generate_report(p_waves, qrs, t_waves)
        >>> print(report.overall_quality, report.all_issues)
    """

    def __init__(self, morphology_validator: MorphologyValidator | None = None):
        self.morphology_validator = morphology_validator or MorphologyValidator()

    def validate_p_waves(self, series: Sequence[WaveEvent]) -> QualityCheck:
        events = ensure_event_list(series, "p_waves")
        issues = []
        accuracy = 1.0

        for event in events:
            if (
                event.duration_ms is not None
                and event.duration_ms > CQC.MAX_P_DURATION_MS
            ):
                issues.append(
                    f"P wave duration excessive ({event.duration_ms:g}ms) "
                    f"at {event.time_ms:g}ms"
                )
                accuracy *= CQC.DURATION_PENALTY

            if (
                event.amplitude_mv is not None
                and event.amplitude_mv > CQC.MAX_P_AMPLITUDE_MV
            ):
                issues.append(
                    f"P wave amplitude high ({event.amplitude_mv:g}mV) at "
                    f"{event.time_ms:g}ms - possible atrial enlargement"
                )

        return self._build_check(WaveKind.P, accuracy, issues, len(events))

    def validate_qrs_complexes(self, series: Sequence[WaveEvent]) -> QualityCheck:
        events = ensure_event_list(series, "qrs_complexes")
        issues = []
        accuracy = 1.0

        for event in events:
            if (
                event.duration_ms is not None
                and event.duration_ms > CQC.MAX_QRS_DURATION_MS
            ):
                issues.append(
                    f"Wide QRS ({event.duration_ms:g}ms) at {event.time_ms:g}ms "
                    "- check for bundle branch block"
                )

            if not self.morphology_validator.has_sharp_onset(event):
                issues.append(f"QRS at {event.time_ms:g}ms lacks a sharp onset")
                accuracy *= CQC.MORPHOLOGY_PENALTY

        return self._build_check(WaveKind.QRS, accuracy, issues, len(events))

    def validate_t_waves(self, series: Sequence[WaveEvent]) -> QualityCheck:
        events = ensure_event_list(series, "t_waves")
        issues = []
        accuracy = 1.0

        for event in events:
            if event.peak_sharpness is None:
                issues.append(f"T wave morphology not described at {event.time_ms:g}ms")
                accuracy *= CQC.MISSING_DESCRIPTOR_PENALTY

            if (
                event.amplitude_mv is not None
                and abs(event.amplitude_mv) > CQC.MAX_T_AMPLITUDE_MV
            ):
                issues.append(
                    f"T wave amplitude unusual ({event.amplitude_mv:g}mV) "
                    f"at {event.time_ms:g}ms"
                )

        return self._build_check(WaveKind.T, accuracy, issues, len(events))

    def generate_report(
        self,
        p_series: Sequence[WaveEvent],
        qrs_series: Sequence[WaveEvent],
        t_series: Sequence[WaveEvent],
    ) -> ComponentQualityReport:
        """
        Run all per-type checks and combine them.

        Args:
            p_series: P wave events
            qrs_series: QRS complex events
            t_series: T wave events

        Returns:
            ComponentQualityReport with overall accuracy as the mean of the
            three per-type accuracies
        """
        p_check = self.validate_p_waves(p_series)
        qrs_check = self.validate_qrs_complexes(qrs_series)
        t_check = self.validate_t_waves(t_series)

        overall = float(
            np.mean([p_check.accuracy, qrs_check.accuracy, t_check.accuracy])
        )
        report = ComponentQualityReport(
            overall_accuracy=overall,
            overall_quality=grade_accuracy(overall),
            p_waves=p_check,
            qrs_complexes=qrs_check,
            t_waves=t_check,
        )
        logger.debug(
            f"Component quality: {report.overall_quality} ({overall:.2f}), "
            f"{len(report.all_issues)} issue(s)"
        )
        return report

    def _build_check(
        self, kind: WaveKind, accuracy: float, issues: list[str], count: int
    ) -> QualityCheck:
        return QualityCheck(
            kind=kind,
            accuracy=accuracy,
            issues=issues,
            component_count=count,
            quality_score=grade_accuracy(accuracy),
        )
