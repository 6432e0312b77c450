"""
Probe aggregation: total car count covering an arbitrary map position.

An entry covers the probe when the probe lies within the entry's own radius,
boundary included. Hub clustering uses a strict comparison instead; both
conventions are kept as they are.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..store.entries import LocatedEntry
from .distance import distances_from


@dataclass
class ClickAggregate:
    """Summed car count at a probe position."""
    lat: float
    lng: float
    total_count: int
    member_indices: List[int]


def covering_indices(entries: Sequence[LocatedEntry], lat: float, lng: float) -> List[int]:
    """Store indices of entries whose radius reaches ``(lat, lng)``."""
    if not entries:
        return []
    distances = distances_from(lat, lng, entries)
    return [i for i, entry in enumerate(entries) if distances[i] <= entry.radius]


def aggregate_at(entries: Sequence[LocatedEntry], lat: float, lng: float) -> int:
    """Sum the counts of every entry covering the probe position."""
    return sum(entries[i].count for i in covering_indices(entries, lat, lng))


def probe(entries: Sequence[LocatedEntry], lat: float, lng: float) -> Optional[ClickAggregate]:
    """
    Aggregate at a map click.

    Returns None when the total is zero, which is how the map surface tells
    "nothing here" apart from a count worth showing.
    """
    members = covering_indices(entries, lat, lng)
    total = sum(entries[i].count for i in members)
    if total <= 0:
        return None
    return ClickAggregate(lat=lat, lng=lng, total_count=total, member_indices=members)

