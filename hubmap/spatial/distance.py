"""
Great-circle distances in meters.

Radii stored on entries are calibrated against the haversine distance on a
sphere of radius 6 371 000 m, the same model web map libraries use for
``distanceTo``.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..store.entries import LocatedEntry

EARTH_RADIUS_M = 6371000.0


def haversine_m(lat1, lng1, lat2, lng2):
    """
    Haversine distance between points given in decimal degrees.

    Accepts scalars or numpy arrays (broadcast element-wise).

    Returns:
        Distance in meters (float or ndarray)
    """
    lat1, lng1, lat2, lng2 = map(np.radians, (lat1, lng1, lat2, lng2))
    dlat = lat2 - lat1
    dlng = lng2 - lng1
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlng / 2) ** 2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def coordinates_of(entries: Sequence[LocatedEntry]) -> np.ndarray:
    """Return an (n, 2) array of ``[lat, lng]`` rows in store order."""
    if not entries:
        return np.empty((0, 2), dtype=float)
    return np.array([[e.lat, e.lng] for e in entries], dtype=float)


def distances_from(lat: float, lng: float, entries: Sequence[LocatedEntry]) -> np.ndarray:
    """Distance in meters from ``(lat, lng)`` to every entry, in store order."""
    coords = coordinates_of(entries)
    return haversine_m(lat, lng, coords[:, 0], coords[:, 1])
