"""
Rate and regularity tracking for cardiac wave components.

Turns a series of detected P waves or QRS complexes into a RateProfile: event
count, mean rate from consecutive inter-event intervals, and a variance-based
regularity verdict.
"""

import logging

from collections.abc import Sequence

import numpy as np

from avtrack.analysis.types import RateProfile, WaveEvent
from avtrack.constants import ComponentTrackingConstants as CTC
from avtrack.constants import Regularity
from avtrack.parsers.events import ensure_event_list

logger = logging.getLogger(__name__)

__all__ = ["ComponentTracker", "RateProfile"]


def _round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


class ComponentTracker:
    """
    Computes rate and regularity profiles for single-kind component series.

    Events are sorted by time before any interval is taken, so callers may
    pass series in extraction order.

    Example:
        >>> tracker = ComponentTracker()
        >>> profile = tracker.compute_rate_profile(p_waves)
        >>> print(f"Atrial rate: {profile.rate_bpm} bpm ({profile.regularity.value})")
    """

    def __init__(
        self,
        regularity_variance_ratio: float = CTC.P_REGULARITY_VARIANCE_RATIO,
        wide_qrs_threshold_ms: float = CTC.WIDE_QRS_THRESHOLD_MS,
    ):
        """
        Initialize the tracker.

        Args:
            regularity_variance_ratio: Default variance-to-mean-interval ratio
                below which a series is REGULAR
            wide_qrs_threshold_ms: Mean QRS width above which complexes are wide
        """
        self.regularity_variance_ratio = regularity_variance_ratio
        self.wide_qrs_threshold_ms = wide_qrs_threshold_ms

    @staticmethod
    def sort_events(series: Sequence[WaveEvent]) -> list[WaveEvent]:
        """Return events ordered by time (stable for equal times)."""
        return sorted(series, key=lambda e: e.time_ms)

    def compute_rate_profile(
        self,
        series: Sequence[WaveEvent],
        variance_ratio: float | None = None,
    ) -> RateProfile:
        """
        Compute the rate profile of a component series.

        Fewer than two events never yield a rate and are never REGULAR.

        Args:
            series: Events of a single wave type, any order
            variance_ratio: Regularity ratio override (defaults to the
                tracker's intra-series ratio)

        Returns:
            RateProfile with count, rate, regularity and intervals

        Raises:
            InvalidInputShape: If series is not a list of WaveEvent
        """
        events = ensure_event_list(series)
        ratio = (
            self.regularity_variance_ratio if variance_ratio is None else variance_ratio
        )

        if len(events) < CTC.MIN_EVENTS_FOR_RATE:
            return RateProfile(
                count=len(events),
                rate_bpm=0,
                regularity=Regularity.IRREGULAR,
                intervals_ms=[],
            )

        intervals = self._intervals(events)
        avg_interval = float(np.mean(intervals))

        if np.isfinite(avg_interval) and avg_interval > 0:
            rate_bpm = _round_half_up(CTC.MS_PER_MINUTE / avg_interval)
        else:
            rate_bpm = 0

        profile = RateProfile(
            count=len(events),
            rate_bpm=rate_bpm,
            regularity=self._classify_regularity(intervals, ratio),
            intervals_ms=[float(i) for i in intervals],
        )
        logger.debug(
            f"Rate profile: {profile.count} events, {profile.rate_bpm} bpm, "
            f"{profile.regularity.value} (ratio {ratio})"
        )
        return profile

    def assess_regularity(
        self, series: Sequence[WaveEvent], variance_ratio: float
    ) -> Regularity:
        """
        Classify regularity of a series with an explicit variance ratio.

        Args:
            series: Events of a single wave type, any order
            variance_ratio: Variance-to-mean-interval ratio threshold

        Returns:
            REGULAR or IRREGULAR
        """
        events = ensure_event_list(series)
        if len(events) < CTC.MIN_EVENTS_FOR_RATE:
            return Regularity.IRREGULAR
        return self._classify_regularity(self._intervals(events), variance_ratio)

    def measure_qrs_width(self, series: Sequence[WaveEvent]) -> float:
        """Mean QRS duration in ms; missing durations count as 80 ms."""
        events = ensure_event_list(series)
        if not events:
            return 0.0

        widths = [
            e.duration_ms if e.duration_ms is not None else CTC.DEFAULT_QRS_DURATION_MS
            for e in events
        ]
        return float(np.mean(widths))

    def describe_qrs_morphology(self, series: Sequence[WaveEvent]) -> str:
        """Describe QRS width as wide or narrow."""
        if self.measure_qrs_width(series) > self.wide_qrs_threshold_ms:
            return "Wide QRS complexes"
        return "Normal narrow QRS complexes"

    def _intervals(self, events: list[WaveEvent]) -> np.ndarray:
        times = np.array([e.time_ms for e in self.sort_events(events)], dtype=float)
        return np.diff(times)

    def _classify_regularity(self, intervals: np.ndarray, ratio: float) -> Regularity:
        """Variance (ms^2) compared against mean interval (ms) scaled by ratio."""
        if len(intervals) == 0:
            return Regularity.IRREGULAR

        avg_interval = float(np.mean(intervals))
        variance = float(np.mean((intervals - avg_interval) ** 2))

        if variance < avg_interval * ratio:
            return Regularity.REGULAR
        return Regularity.IRREGULAR
