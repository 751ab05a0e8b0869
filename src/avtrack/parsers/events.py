"""
Parsing of extractor payloads into typed wave event series.

The upstream extractor emits a JSON object with one list per wave type.
Missing lists are treated as empty; anything structurally wrong (non-object
payload, non-list series, non-object events, missing or non-numeric
``timeMs``) raises InvalidInputShape.
"""

import json
import logging

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from avtrack.analysis.types import WaveEvent
from avtrack.constants import WaveKind

logger = logging.getLogger(__name__)

__all__ = [
    "COMPONENTS_KEY",
    "SERIES_KEYS",
    "InvalidInputShape",
    "ParsedPayload",
    "ensure_event_list",
    "load_payload",
    "parse_components",
    "parse_payload",
    "parse_series",
]

SERIES_KEYS: dict[str, WaveKind] = {
    "pWaves": WaveKind.P,
    "qrsComplexes": WaveKind.QRS,
    "tWaves": WaveKind.T,
}
COMPONENTS_KEY = "components"

_KIND_KEYS = ("kind", "type")


class InvalidInputShape(Exception):
    """Raised when input is not a well-formed wave event payload."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


@dataclass(frozen=True)
class ParsedPayload:
    """
    Typed view of an extractor payload.

    Attributes:
        p_waves: Events from ``pWaves``
        qrs_complexes: Events from ``qrsComplexes``
        t_waves: Events from ``tWaves``
        components: Explicit mixed-kind list for morphology validation, or None
            when the payload did not carry one
    """

    p_waves: list[WaveEvent] = field(default_factory=list)
    qrs_complexes: list[WaveEvent] = field(default_factory=list)
    t_waves: list[WaveEvent] = field(default_factory=list)
    components: list[WaveEvent] | None = None

    @property
    def morphology_components(self) -> list[WaveEvent]:
        """Components to validate; defaults to the QRS and T series."""
        if self.components is not None:
            return list(self.components)
        return [*self.qrs_complexes, *self.t_waves]


def ensure_event_list(series: Any, name: str = "series") -> list[WaveEvent]:
    """
    Check that a series is a list of WaveEvent instances.

    Args:
        series: Candidate series
        name: Field name used in error messages

    Returns:
        The series as a list

    Raises:
        InvalidInputShape: If series is not a list/tuple of WaveEvent
    """
    if not isinstance(series, (list, tuple)):
        raise InvalidInputShape(
            f"{name} must be a list of wave events, got {type(series).__name__}",
            field=name,
        )
    for index, event in enumerate(series):
        if not isinstance(event, WaveEvent):
            raise InvalidInputShape(
                f"{name}[{index}] is {type(event).__name__}, expected WaveEvent",
                field=f"{name}[{index}]",
            )
    return list(series)


def _validate_event(location: str, data: dict[str, Any]) -> WaveEvent:
    try:
        return WaveEvent.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidInputShape(
            f"Malformed event at {location}: {problems}", field=location
        ) from e


def _require_list(raw: Any, name: str) -> list[Any]:
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raise InvalidInputShape(
            f"'{name}' must be a list, got {type(raw).__name__}", field=name
        )
    return list(raw)


def _require_mapping(raw: Any, location: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise InvalidInputShape(
            f"Event at {location} must be an object, got {type(raw).__name__}",
            field=location,
        )
    return raw


def parse_series(raw: Any, kind: WaveKind, name: str = "series") -> list[WaveEvent]:
    """
    Parse a single-kind event list.

    Any ``kind``/``type`` key on the events is ignored; the list determines
    the wave type.

    Args:
        raw: List of event objects (None is treated as empty)
        kind: Wave type assigned to every event
        name: Field name used in error messages

    Returns:
        Parsed events in input order

    Raises:
        InvalidInputShape: If the list or any event is malformed
    """
    events = []
    for index, item in enumerate(_require_list(raw, name)):
        location = f"{name}[{index}]"
        mapping = _require_mapping(item, location)
        data = {k: v for k, v in mapping.items() if k not in _KIND_KEYS}
        data["kind"] = kind
        events.append(_validate_event(location, data))
    return events


def parse_components(raw: Any, name: str = COMPONENTS_KEY) -> list[WaveEvent]:
    """
    Parse a mixed-kind component list where each event names its own type.

    Raises:
        InvalidInputShape: If the list or any event is malformed, or an event
            has no recognised ``kind``/``type``
    """
    events = []
    for index, item in enumerate(_require_list(raw, name)):
        location = f"{name}[{index}]"
        mapping = _require_mapping(item, location)
        events.append(_validate_event(location, dict(mapping)))
    return events


def parse_payload(payload: Any) -> ParsedPayload:
    """
    Parse an extractor payload.

    Args:
        payload: JSON-compatible object with ``pWaves``, ``qrsComplexes``,
            and optionally ``tWaves`` and ``components``

    Returns:
        ParsedPayload with typed series

    Raises:
        InvalidInputShape: If the payload is structurally malformed
    """
    if not isinstance(payload, Mapping):
        raise InvalidInputShape(
            f"Payload must be an object, got {type(payload).__name__}"
        )

    series = {
        key: parse_series(payload.get(key), kind, name=key)
        for key, kind in SERIES_KEYS.items()
    }

    components = None
    if payload.get(COMPONENTS_KEY) is not None:
        components = parse_components(payload[COMPONENTS_KEY])

    parsed = ParsedPayload(
        p_waves=series["pWaves"],
        qrs_complexes=series["qrsComplexes"],
        t_waves=series["tWaves"],
        components=components,
    )
    logger.debug(
        f"Parsed payload: {len(parsed.p_waves)} P, {len(parsed.qrs_complexes)} QRS, "
        f"{len(parsed.t_waves)} T, "
        f"{'explicit' if components is not None else 'derived'} components"
    )
    return parsed


def load_payload(text: str) -> dict[str, Any]:
    """
    Decode a JSON payload document.

    Raises:
        InvalidInputShape: If the text is not valid JSON or not an object
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidInputShape(f"Payload is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise InvalidInputShape(
            f"Payload must be a JSON object, got {type(payload).__name__}"
        )
    return payload
