"""
Map controller: the single owner of the point store and hub state.

Every mutation recomputes hubs explicitly before returning, so callers
always read hubs that match the current entries and threshold.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from .spatial import ClickAggregate, HubCluster, compute_hubs, normalize_threshold, probe
from .store import LocatedEntry, PointStore, apply_radius_override, parse_override_radius

logger = logging.getLogger(__name__)


class MapController:
    """Owns the entries, the hub threshold and the last computed hubs."""

    def __init__(self, store: Optional[PointStore] = None, threshold: Any = None):
        self.store = store if store is not None else PointStore()
        self._threshold = normalize_threshold(threshold)
        self._hubs: List[HubCluster] = []
        self.recompute_hubs()

    @property
    def entries(self) -> List[LocatedEntry]:
        return self.store.entries

    @property
    def threshold(self) -> Optional[float]:
        return self._threshold

    @property
    def hubs(self) -> List[HubCluster]:
        return list(self._hubs)

    def recompute_hubs(self) -> List[HubCluster]:
        self._hubs = compute_hubs(self.store.entries, self._threshold)
        logger.debug(
            "Recomputed hubs: %d entries, threshold=%s, %d hubs",
            len(self.store),
            self._threshold,
            len(self._hubs),
        )
        return self.hubs

    # -----------------------------
    # Store Mutations
    # -----------------------------

    def load(self, entries: Iterable[LocatedEntry]) -> None:
        """Replace the store with entries read from persistence."""
        self.store.replace(entries)
        self.recompute_hubs()

    def import_entries(self, entries: Iterable[LocatedEntry]) -> None:
        """Replace the store with a resolved import batch."""
        self.store.replace(entries)
        logger.info("Imported %d entries (store replaced)", len(self.store))
        self.recompute_hubs()

    def add_entry(self, entry: LocatedEntry) -> int:
        index = self.store.add(entry)
        self.recompute_hubs()
        return index

    def edit_entry(self, index: int, **changes: Any) -> LocatedEntry:
        updated = self.store.update(index, **changes)
        self.recompute_hubs()
        return updated

    def remove_entry(self, index: int) -> LocatedEntry:
        removed = self.store.remove(index)
        self.recompute_hubs()
        return removed

    def set_radius_override(self, value: Any) -> bool:
        """
        Apply one radius to every entry.

        Returns:
            True when applied, False when ``value`` is not a usable radius
        """
        radius = parse_override_radius(value)
        if radius is None:
            logger.info("Ignoring radius override %r: not a non-negative number", value)
            return False
        self.store.replace(apply_radius_override(self.store.entries, radius))
        self.recompute_hubs()
        return True

    # -----------------------------
    # Hubs and Probes
    # -----------------------------

    def set_threshold(self, value: Any) -> List[HubCluster]:
        """Set the hub threshold (None or blank disables hubs) and return the new hubs."""
        self._threshold = normalize_threshold(value)
        return self.recompute_hubs()

    def probe(self, lat: float, lng: float) -> Optional[ClickAggregate]:
        return probe(self.store.entries, lat, lng)
