"""
QRS vs T wave morphology validation.

A tall, broad T wave read as a QRS complex inflates the ventricular rate and
can hide AV dissociation. This module checks every QRS-labelled component for
the sharp onset a true QRS complex has, and flags rounded, slow deflections
that look like T waves.
"""

import logging

from collections.abc import Sequence

import numpy as np

from avtrack.analysis.types import MorphologyFinding, MorphologyReport, WaveEvent
from avtrack.constants import MorphologyConstants as MC
from avtrack.constants import WaveKind
from avtrack.parsers.events import ensure_event_list

logger = logging.getLogger(__name__)

__all__ = ["MorphologyValidator", "MorphologyFinding", "MorphologyReport"]


class MorphologyValidator:
    """
    Validates QRS labels against onset slope, peak sharpness and duration.

    Missing descriptors fall back to per-check defaults, which are chosen so
    that an event without descriptors passes both checks as a QRS.

    Example:
        >>> validator = MorphologyValidator()
        >>> report = validator.validate(components)
        >>> for finding in report.reclassifications:
        ...     print(finding.reason)
    """

    def has_sharp_onset(self, event: WaveEvent) -> bool:
        """QRS complexes deflect rapidly from baseline and stay narrow."""
        onset_slope = (
            event.onset_slope
            if event.onset_slope is not None
            else MC.DEFAULT_ONSET_SLOPE
        )
        duration = (
            event.duration_ms
            if event.duration_ms is not None
            else MC.SHARP_ONSET_DEFAULT_DURATION_MS
        )
        return (
            onset_slope > MC.MIN_QRS_ONSET_SLOPE and duration < MC.MAX_QRS_DURATION_MS
        )

    def is_rounded_morphology(self, event: WaveEvent) -> bool:
        """T waves are broad with a blunt peak."""
        sharpness = (
            event.peak_sharpness
            if event.peak_sharpness is not None
            else MC.DEFAULT_PEAK_SHARPNESS
        )
        duration = (
            event.duration_ms
            if event.duration_ms is not None
            else MC.ROUNDED_DEFAULT_DURATION_MS
        )
        return (
            sharpness < MC.MAX_ROUNDED_PEAK_SHARPNESS
            and duration > MC.MIN_ROUNDED_DURATION_MS
        )

    def validate(self, components: Sequence[WaveEvent]) -> MorphologyReport:
        """
        Check QRS-labelled components for T wave misclassification.

        Args:
            components: Mixed-kind components; only QRS labels are checked

        Returns:
            MorphologyReport with findings and overall confidence

        Raises:
            InvalidInputShape: If components is not a list of WaveEvent
        """
        events = ensure_event_list(components, name="components")
        findings: list[MorphologyFinding] = []

        for event in events:
            if event.kind != WaveKind.QRS:
                continue

            if not self.has_sharp_onset(event):
                findings.append(
                    MorphologyFinding(
                        event=event,
                        reclassify_as=WaveKind.T,
                        reason=(
                            f"Component at {event.time_ms:g}ms may be T wave, not QRS: "
                            "gradual onset, not sharp QRS pattern"
                        ),
                    )
                )

            if self.is_rounded_morphology(event):
                findings.append(
                    MorphologyFinding(
                        event=event,
                        reclassify_as=None,
                        reason=(
                            f"Component at {event.time_ms:g}ms has rounded "
                            "morphology typical of T wave"
                        ),
                    )
                )

        confidence = self.calculate_confidence(events)

        if findings:
            logger.warning(
                f"Morphology validation flagged {len(findings)} finding(s) "
                f"across {len(events)} components"
            )
        return MorphologyReport(findings=findings, confidence=confidence)

    def calculate_confidence(self, components: Sequence[WaveEvent]) -> float:
        """Mean per-component consistency score (0.5 for no components)."""
        if not components:
            return MC.EMPTY_CONFIDENCE

        scores = [self._component_score(event) for event in components]
        return float(np.mean(scores))

    def _component_score(self, event: WaveEvent) -> float:
        if event.kind == WaveKind.QRS and self.has_sharp_onset(event):
            return MC.CONSISTENT_SCORE
        if event.kind == WaveKind.T and self.is_rounded_morphology(event):
            return MC.CONSISTENT_SCORE
        return MC.INCONSISTENT_SCORE
