"""Located entries and the ordered store that holds them."""

from .entries import (
    DEFAULT_CIRCLE_COLOR,
    DEFAULT_DOT_COLOR,
    DEFAULT_RADIUS_M,
    EDITABLE_FIELDS,
    LocatedEntry,
    Position,
    entries_from_records,
    entry_from_record,
    entry_to_record,
    parse_count,
    parse_radius,
)
from .point_store import PointStore, apply_radius_override, parse_override_radius

__all__ = [
    "DEFAULT_CIRCLE_COLOR",
    "DEFAULT_DOT_COLOR",
    "DEFAULT_RADIUS_M",
    "EDITABLE_FIELDS",
    "LocatedEntry",
    "Position",
    "entries_from_records",
    "entry_from_record",
    "entry_to_record",
    "parse_count",
    "parse_radius",
    "PointStore",
    "apply_radius_override",
    "parse_override_radius",
]
