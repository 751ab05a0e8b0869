"""
Synthetic test data generators for wave event series and extractor payloads.

Provides functions to generate controlled, reproducible test data for unit testing.
"""

from typing import Any

import numpy as np

from avtrack.analysis.types import WaveEvent
from avtrack.constants import WaveKind


def generate_times(
    interval_ms: float,
    count: int,
    start_ms: float = 0.0,
) -> list[float]:
    """
    Generate evenly spaced event times.

    Args:
        interval_ms: Spacing between consecutive events
        count: Number of events
        start_ms: Time of the first event

    Returns:
        Event times in milliseconds
    """
    return [float(t) for t in start_ms + interval_ms * np.arange(count)]


def generate_jittered_times(
    interval_ms: float,
    count: int,
    jitter_ms: float,
    start_ms: float = 0.0,
    seed: int = 42,
) -> list[float]:
    """
    Generate event times with uniform random jitter around an even spacing.

    Args:
        interval_ms: Nominal spacing between consecutive events
        count: Number of events
        jitter_ms: Maximum absolute displacement of each event
        start_ms: Nominal time of the first event
        seed: Random seed for reproducibility

    Returns:
        Event times in milliseconds (not guaranteed sorted for large jitter)
    """
    rng = np.random.default_rng(seed)
    nominal = start_ms + interval_ms * np.arange(count)
    jitter = rng.uniform(-jitter_ms, jitter_ms, count)
    return [float(t) for t in nominal + jitter]


def make_events(
    times: list[float],
    kind: WaveKind,
    **descriptors: float,
) -> list[WaveEvent]:
    """
    Build WaveEvents at the given times.

    Args:
        times: Event times in milliseconds
        kind: Wave type for every event
        **descriptors: Snake-case descriptor fields applied to every event
            (e.g. duration_ms=90.0)

    Returns:
        List of WaveEvent
    """
    return [WaveEvent(time_ms=t, kind=kind, **descriptors) for t in times]


def generate_series(
    kind: WaveKind,
    interval_ms: float,
    count: int,
    start_ms: float = 0.0,
    **descriptors: float,
) -> list[WaveEvent]:
    """Evenly spaced WaveEvent series (see generate_times)."""
    times = generate_times(interval_ms, count, start_ms)
    return make_events(times, kind, **descriptors)


def make_event_dicts(
    times: list[float],
    **fields: Any,
) -> list[dict[str, Any]]:
    """
    Build extractor-style event objects.

    Args:
        times: Event times in milliseconds
        **fields: camelCase fields added to every event (e.g. durationMs=90.0)

    Returns:
        List of JSON-compatible event dicts
    """
    return [{"timeMs": t, **fields} for t in times]


def build_payload(
    p_times: list[float],
    qrs_times: list[float],
    t_times: list[float] | None = None,
) -> dict[str, Any]:
    """Build an extractor payload from event times."""
    payload: dict[str, Any] = {
        "pWaves": make_event_dicts(p_times),
        "qrsComplexes": make_event_dicts(qrs_times),
    }
    if t_times is not None:
        payload["tWaves"] = make_event_dicts(t_times, peakSharpness=0.2)
    return payload


def normal_sinus_payload() -> dict[str, Any]:
    """Four beats at 70 bpm with a 160 ms PR interval."""
    return build_payload(
        p_times=[0.0, 857.0, 1714.0, 2571.0],
        qrs_times=[160.0, 1017.0, 1874.0, 2731.0],
    )


def complete_heart_block_payload() -> dict[str, Any]:
    """Atria at 70 bpm and ventricles at 40 bpm with no fixed PR interval."""
    return build_payload(
        p_times=generate_times(857.0, 8),
        qrs_times=generate_times(1500.0, 4, start_ms=500.0),
    )
