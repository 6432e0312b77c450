"""
hubmap/spatial: Distances, hub clustering and probe aggregation.

This module provides the greedy hub clustering engine and the map-click
aggregation over located entries.
"""

from .distance import EARTH_RADIUS_M, distances_from, haversine_m
from .hubs import HubCluster, compute_hubs, normalize_threshold
from .probe import ClickAggregate, aggregate_at, covering_indices, probe

__all__ = [
    "EARTH_RADIUS_M",
    "distances_from",
    "haversine_m",
    "HubCluster",
    "compute_hubs",
    "normalize_threshold",
    "ClickAggregate",
    "aggregate_at",
    "covering_indices",
    "probe",
]
