"""
Atrioventricular conduction classification.

Complete heart block presents as atria and ventricles beating at different,
individually regular rates with no fixed PR relationship. The detector
combines three signals from the P and QRS series:

1. Rate mismatch between atrial and ventricular rates
2. AV dissociation: too few P-QRS pairs with a physiological PR interval
3. Independent rhythms: both series regular on their own

Missing a complete heart block is the costly error, so each call returns its
supporting evidence alongside the classification.
"""

import logging

from collections.abc import Sequence

from avtrack.analysis.component_tracker import ComponentTracker
from avtrack.analysis.thresholds import DEFAULT_THRESHOLDS, DetectorThresholds
from avtrack.analysis.types import ConductionAssessment, RateProfile, WaveEvent
from avtrack.constants import ComponentTrackingConstants as CTC
from avtrack.constants import HeartBlockConstants as HBC
from avtrack.constants import (
    RECOMMENDED_ACTIONS,
    ConductionClass,
    Regularity,
    Urgency,
)
from avtrack.parsers.events import ensure_event_list

logger = logging.getLogger(__name__)

__all__ = ["HeartBlockDetector", "ConductionAssessment"]

INSUFFICIENT_DATA_NOTE = "insufficient data"


class HeartBlockDetector:
    """
    Classifies AV conduction from P wave and QRS rate profiles.

    P and QRS events are paired by index after sorting by time. Pairing is
    positional, so a dropped or extra beat shifts every later pair.

    Example:
        >>> tracker = ComponentTracker()
        >>> detector = HeartBlockDetector(tracker=tracker)
        >>> result = detector.assess(
        ...     tracker.compute_rate_profile(p_waves), p_waves,
        ...     tracker.compute_rate_profile(qrs), qrs,
        ... )
        >>> result.classification
        <ConductionClass.COMPLETE_HEART_BLOCK: 'COMPLETE_HEART_BLOCK'>
    """

    def __init__(
        self,
        thresholds: DetectorThresholds = DEFAULT_THRESHOLDS,
        tracker: ComponentTracker | None = None,
    ):
        """
        Initialize the detector.

        Args:
            thresholds: Classification thresholds
            tracker: Tracker used for the independent-rhythm regularity check
        """
        self.thresholds = thresholds
        self.tracker = tracker or ComponentTracker(
            regularity_variance_ratio=thresholds.p_regularity_variance_ratio
        )

    def assess(
        self,
        p_profile: RateProfile,
        p_series: Sequence[WaveEvent],
        qrs_profile: RateProfile,
        qrs_series: Sequence[WaveEvent],
    ) -> ConductionAssessment:
        """
        Classify AV conduction.

        Never raises for numeric edge cases: empty or single-event series carry
        a zero rate through the same arithmetic. When neither series has the
        two events a rate needs (not only when both are empty), the result is
        a low-confidence NORMAL with "insufficient data" in the evidence.

        ``av_dissociation`` is True only for COMPLETE_HEART_BLOCK; the PR
        consistency verdict is always reported in the evidence.

        Args:
            p_profile: Atrial rate profile
            p_series: P wave events, any order
            qrs_profile: Ventricular rate profile
            qrs_series: QRS complex events, any order

        Returns:
            ConductionAssessment with classification, urgency and evidence

        Raises:
            InvalidInputShape: If a series is not a list of WaveEvent
        """
        p_events = self.tracker.sort_events(ensure_event_list(p_series, "p_series"))
        qrs_events = self.tracker.sort_events(
            ensure_event_list(qrs_series, "qrs_series")
        )

        atrial_rate = p_profile.rate_bpm
        ventricular_rate = qrs_profile.rate_bpm
        rate_diff = abs(atrial_rate - ventricular_rate)

        consistency = self.av_consistency_ratio(p_events, qrs_events)
        dissociation = (
            consistency is not None
            and consistency < self.thresholds.dissociation_consistency_ratio
        )
        independent = self.has_independent_rhythms(p_events, qrs_events)

        evidence = [
            f"Atrial rate: {atrial_rate} bpm",
            f"Ventricular rate: {ventricular_rate} bpm",
            self._describe_consistency(consistency, dissociation),
        ]

        if (
            p_profile.count < CTC.MIN_EVENTS_FOR_RATE
            and qrs_profile.count < CTC.MIN_EVENTS_FOR_RATE
        ):
            evidence.append(INSUFFICIENT_DATA_NOTE)
            evidence.append(
                f"Only {p_profile.count} P wave(s) and {qrs_profile.count} "
                "QRS complex(es); rates cannot be computed"
            )
            logger.info("Conduction assessment skipped: insufficient data")
            return self._build(
                ConductionClass.NORMAL,
                Urgency.ROUTINE,
                HBC.INSUFFICIENT_DATA_CONFIDENCE,
                evidence,
                rate_diff,
            )

        classification, urgency, confidence = self.classify(
            rate_diff, dissociation, independent
        )

        if classification == ConductionClass.COMPLETE_HEART_BLOCK:
            evidence.extend(
                [
                    "AV dissociation confirmed",
                    "P waves march independently of QRS",
                    "COMPLETE HEART BLOCK DETECTED",
                ]
            )
            logger.warning(
                f"Complete heart block detected: atrial {atrial_rate} bpm, "
                f"ventricular {ventricular_rate} bpm"
            )
        elif classification == ConductionClass.SECOND_DEGREE:
            evidence.append(
                f"Possible 2nd degree AV block - rate difference: {rate_diff} bpm"
            )
            if dissociation and not independent:
                evidence.append("Atrial and ventricular rhythms are not both regular")
            logger.info(f"Partial AV block suspected: rate difference {rate_diff} bpm")
        else:
            evidence.append("Normal AV conduction pattern")
            logger.debug(f"Normal AV conduction: rate difference {rate_diff} bpm")

        return self._build(
            classification, urgency, confidence, evidence, rate_diff
        )

    def classify(
        self, rate_diff: int, dissociation: bool, independent: bool
    ) -> tuple[ConductionClass, Urgency, float]:
        """
        Map the three conduction signals to a classification.

        Args:
            rate_diff: Absolute atrial vs ventricular rate difference (bpm)
            dissociation: Whether P-QRS pairing failed the consistency test
            independent: Whether both rhythms are regular on their own

        Returns:
            Tuple of (classification, urgency, confidence)
        """
        if (
            rate_diff > self.thresholds.complete_block_rate_diff_bpm
            and dissociation
            and independent
        ):
            return (
                ConductionClass.COMPLETE_HEART_BLOCK,
                Urgency.EMERGENT,
                HBC.COMPLETE_BLOCK_CONFIDENCE,
            )
        if rate_diff > self.thresholds.partial_block_rate_diff_bpm:
            return (
                ConductionClass.SECOND_DEGREE,
                Urgency.URGENT,
                HBC.PARTIAL_BLOCK_CONFIDENCE,
            )
        return ConductionClass.NORMAL, Urgency.ROUTINE, HBC.NORMAL_CONFIDENCE

    def pr_intervals(
        self, p_series: Sequence[WaveEvent], qrs_series: Sequence[WaveEvent]
    ) -> list[float]:
        """PR intervals of index-paired events (i-th P with i-th QRS)."""
        p_events = self.tracker.sort_events(p_series)
        qrs_events = self.tracker.sort_events(qrs_series)
        return [qrs.time_ms - p.time_ms for p, qrs in zip(p_events, qrs_events)]

    def av_consistency_ratio(
        self, p_series: Sequence[WaveEvent], qrs_series: Sequence[WaveEvent]
    ) -> float | None:
        """
        Fraction of index-paired PR intervals inside the physiological window.

        Returns:
            Ratio in [0, 1], or None when there are no pairs to compare
        """
        intervals = self.pr_intervals(p_series, qrs_series)
        if not intervals:
            return None

        consistent = sum(
            1
            for pr in intervals
            if self.thresholds.min_pr_interval_ms
            < pr
            < self.thresholds.max_pr_interval_ms
        )
        return consistent / len(intervals)

    def has_independent_rhythms(
        self, p_series: Sequence[WaveEvent], qrs_series: Sequence[WaveEvent]
    ) -> bool:
        """Both series regular under the independent-rhythm variance ratio."""
        ratio = self.thresholds.independent_rhythm_variance_ratio
        return (
            self.tracker.assess_regularity(p_series, ratio) == Regularity.REGULAR
            and self.tracker.assess_regularity(qrs_series, ratio) == Regularity.REGULAR
        )

    def _describe_consistency(self, ratio: float | None, dissociation: bool) -> str:
        window = (
            f"{self.thresholds.min_pr_interval_ms:g}-"
            f"{self.thresholds.max_pr_interval_ms:g} ms"
        )
        if ratio is None:
            return "P-QRS relationship not assessable: no paired events"
        if dissociation:
            return (
                f"No consistent P-QRS relationship: {ratio:.0%} of PR intervals "
                f"within {window}"
            )
        return (
            f"Consistent P-QRS relationship: {ratio:.0%} of PR intervals "
            f"within {window}"
        )

    def _build(
        self,
        classification: ConductionClass,
        urgency: Urgency,
        confidence: float,
        evidence: list[str],
        rate_diff: int,
    ) -> ConductionAssessment:
        # Dissociation is only reported once it is part of a complete block;
        # a failed PR consistency check alone stays in the evidence.
        return ConductionAssessment(
            classification=classification,
            urgency=urgency,
            confidence=confidence,
            evidence=evidence,
            av_dissociation=classification == ConductionClass.COMPLETE_HEART_BLOCK,
            rate_difference_bpm=rate_diff,
            recommended_action=RECOMMENDED_ACTIONS[urgency],
        )
