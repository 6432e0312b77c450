"""
Greedy hub clustering over located entries.

A hub is a group of nearby entries whose combined car count exceeds a
threshold. Grouping is a single greedy pass in store order:

1. Each unclaimed entry in turn seeds a group
2. The group takes every other unclaimed entry strictly closer to the seed
   than the *seed's* radius (the candidate's own radius plays no part)
3. Groups whose total count exceeds the threshold are emitted and their
   members claimed; other groups are dropped and their members stay free
   for later seeds

The result depends only on the input order. Permuting entries can change
which seed absorbs a point.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

import numpy as np

from ..store.entries import LocatedEntry
from .distance import coordinates_of, haversine_m


@dataclass
class HubCluster:
    """A group of entries whose combined count exceeds the threshold."""

    centroid_lat: float
    """Unweighted mean latitude of the members."""

    centroid_lng: float
    """Unweighted mean longitude of the members."""

    member_indices: List[int] = field(default_factory=list)
    """Store indices of the members, seed first."""

    total_count: int = 0
    """Sum of member car counts."""

    @property
    def size(self) -> int:
        return len(self.member_indices)


def normalize_threshold(value: Any) -> Optional[float]:
    """
    Interpret a threshold as typed in a form field.

    None and blank strings disable clustering. Numbers and numeric strings
    are accepted.

    Raises:
        ValueError: If the value is neither blank nor a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid hub threshold: {value!r}")
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        threshold = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid hub threshold: {value!r}") from exc
    if not math.isfinite(threshold):
        raise ValueError(f"Invalid hub threshold: {value!r}")
    return threshold


def compute_hubs(
    entries: Sequence[LocatedEntry],
    threshold: Any,
) -> List[HubCluster]:
    """
    Group entries into hubs whose total car count exceeds ``threshold``.

    Args:
        entries: Entries in store order
        threshold: Count a group must strictly exceed. None, a blank string
            or a value <= 0 disables clustering. Strings are read as numbers.

    Returns:
        Emitted hubs in seed order (empty when disabled or nothing qualifies)

    Raises:
        ValueError: If ``threshold`` is neither blank nor a finite number
    """
    threshold = normalize_threshold(threshold)
    if threshold is None or threshold <= 0 or not entries:
        return []

    coords = coordinates_of(entries)
    counts = [e.count for e in entries]
    claimed = np.zeros(len(entries), dtype=bool)

    hubs: List[HubCluster] = []
    for i, seed in enumerate(entries):
        if claimed[i]:
            continue

        distances = haversine_m(seed.lat, seed.lng, coords[:, 0], coords[:, 1])
        within = (distances < seed.radius) & ~claimed
        within[i] = False
        members = [i] + np.flatnonzero(within).tolist()

        total = sum(counts[m] for m in members)
        if total <= threshold:
            continue

        centroid = coords[members].mean(axis=0)
        claimed[members] = True
        hubs.append(
            HubCluster(
                centroid_lat=float(centroid[0]),
                centroid_lng=float(centroid[1]),
                member_indices=members,
                total_count=total,
            )
        )

    return hubs
