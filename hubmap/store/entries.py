"""
Located entries: one plotted address with its aggregation attributes.

This module provides:
1. The ``Position`` and ``LocatedEntry`` data models
2. Lenient parsing of car counts and radii typed by users
3. Conversion to and from the persisted JSON record layout
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Iterable, List, Optional, Union

DEFAULT_RADIUS_M = 5000
DEFAULT_CIRCLE_COLOR = "red"
DEFAULT_DOT_COLOR = "black"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

RawCount = Union[str, int, float, None]


def parse_leading_int(value: Any) -> Optional[int]:
    """
    Parse the leading integer of a user-typed value.

    Numbers are truncated toward zero and strings are read up to the first
    non-digit, so ``"7 cars"`` gives 7 and ``"3.9"`` gives 3.

    Returns:
        The parsed integer, or None when nothing parseable is present
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return int(value)
    match = _LEADING_INT.match(str(value))
    if match is None:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        # past the interpreter's int digit limit
        return None


def parse_count(value: RawCount) -> int:
    """Car count used for aggregation. Missing, unparseable and negative give 0."""
    parsed = parse_leading_int(value)
    if parsed is None or parsed < 0:
        return 0
    return parsed


def parse_radius(value: Any, default: int = DEFAULT_RADIUS_M) -> int:
    """Radius in meters; blank, unparseable, zero or negative fall back to ``default``."""
    parsed = parse_leading_int(value)
    if not parsed or parsed < 0:
        return default
    return parsed


@dataclass(frozen=True)
class Position:
    """Geographic coordinate in decimal degrees."""
    lat: float
    lng: float


@dataclass
class LocatedEntry:
    """A geocoded address plotted on the map."""

    address: str
    """Address text as entered by the user."""

    position: Position
    """Geocoded coordinate. Entries are never created without one."""

    radius: float = DEFAULT_RADIUS_M
    """Influence radius in meters, used for display, hubs and probes."""

    num_of_cars: RawCount = ""
    """Car count exactly as entered; see :attr:`count` for the parsed value."""

    tag: str = ""
    circle_color: str = DEFAULT_CIRCLE_COLOR
    dot_color: str = DEFAULT_DOT_COLOR
    show_circle: bool = True

    extra: Dict[str, Any] = field(default_factory=dict)
    """Unknown record keys, passed through untouched."""

    @property
    def count(self) -> int:
        return parse_count(self.num_of_cars)

    @property
    def lat(self) -> float:
        return self.position.lat

    @property
    def lng(self) -> float:
        return self.position.lng


EDITABLE_FIELDS = frozenset(f.name for f in fields(LocatedEntry)) - {"extra"}


def with_changes(entry: LocatedEntry, **changes: Any) -> LocatedEntry:
    """
    Return a copy of ``entry`` with ``changes`` applied.

    Raises:
        ValueError: If a change names a field that cannot be edited
    """
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(
            f"Unknown entry field(s): {', '.join(sorted(unknown))}. "
            f"Editable fields: {', '.join(sorted(EDITABLE_FIELDS))}"
        )
    return replace(entry, **changes)


# -----------------------------
# Record Conversion
# -----------------------------

_RECORD_KEYS = {
    "address",
    "coordinates",
    "radius",
    "circleColor",
    "dotColor",
    "tag",
    "numOfCars",
    "showCircle",
}

# Snake-case field names never pass through as unknown keys
_RESERVED_KEYS = _RECORD_KEYS | {f.name for f in fields(LocatedEntry)}


def entry_to_record(entry: LocatedEntry) -> Dict[str, Any]:
    """Convert an entry to the persisted JSON record layout."""
    record = dict(entry.extra)
    record.update(
        {
            "address": entry.address,
            "coordinates": {"lat": entry.lat, "lng": entry.lng},
            "radius": entry.radius,
            "circleColor": entry.circle_color,
            "dotColor": entry.dot_color,
            "tag": entry.tag,
            "numOfCars": entry.num_of_cars,
            "showCircle": entry.show_circle,
        }
    )
    return record


def _record_text(value: Any, default: str) -> str:
    if value is None or value == "":
        return default
    return str(value)


def _record_count(value: Any) -> RawCount:
    if value is None:
        return ""
    if isinstance(value, float) and not math.isfinite(value):
        return ""
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return value
    return str(value)


def _record_radius(value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if math.isfinite(value) and value >= 0:
            return value
        return DEFAULT_RADIUS_M
    return parse_radius(value)


def entry_from_record(record: Dict[str, Any]) -> Optional[LocatedEntry]:
    """
    Build an entry from a persisted record.

    Returns None when the record has no usable coordinates.
    """
    coords = record.get("coordinates") or {}
    try:
        position = Position(lat=float(coords["lat"]), lng=float(coords["lng"]))
    except (KeyError, TypeError, ValueError):
        return None
    if not (-90 <= position.lat <= 90 and -180 <= position.lng <= 180):
        return None

    radius = record.get("radius")
    return LocatedEntry(
        address=str(record.get("address") or ""),
        position=position,
        radius=_record_radius(radius),
        num_of_cars=_record_count(record.get("numOfCars")),
        tag=_record_text(record.get("tag"), ""),
        circle_color=_record_text(record.get("circleColor"), DEFAULT_CIRCLE_COLOR),
        dot_color=_record_text(record.get("dotColor"), DEFAULT_DOT_COLOR),
        show_circle=record.get("showCircle") is not False,
        extra={k: v for k, v in record.items() if k not in _RESERVED_KEYS},
    )


def entries_from_records(records: Iterable[Dict[str, Any]]) -> List[LocatedEntry]:
    """Convert records, skipping those without coordinates."""
    entries = []
    for record in records:
        if not isinstance(record, dict):
            continue
        entry = entry_from_record(record)
        if entry is not None:
            entries.append(entry)
    return entries
