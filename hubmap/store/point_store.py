"""Ordered in-memory collection of located entries."""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Any, Iterable, Iterator, List, Optional, Sequence

from .entries import LocatedEntry, with_changes


def parse_override_radius(value: Any) -> Optional[float]:
    """Return the override radius if ``value`` is a finite non-negative number, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        radius = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(radius) or radius < 0:
        return None
    return radius


def apply_radius_override(entries: Sequence[LocatedEntry], new_radius: float) -> List[LocatedEntry]:
    """Return copies of ``entries`` that all use ``new_radius``."""
    return [replace(entry, radius=new_radius) for entry in entries]


class PointStore:
    """
    Ordered list of entries, read and written wholesale by collaborators.

    Index-based operations raise ``IndexError`` for positions outside the
    store; negative indices are not accepted.
    """

    def __init__(self, entries: Optional[Iterable[LocatedEntry]] = None):
        self._entries: List[LocatedEntry] = list(entries or [])

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LocatedEntry]:
        return iter(list(self._entries))

    @property
    def entries(self) -> List[LocatedEntry]:
        """Snapshot of the entries in store order."""
        return list(self._entries)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._entries):
            raise IndexError(f"No entry at index {index} (store holds {len(self._entries)})")

    def get(self, index: int) -> LocatedEntry:
        self._check_index(index)
        return self._entries[index]

    def add(self, entry: LocatedEntry) -> int:
        """Append an entry and return its index."""
        self._entries.append(entry)
        return len(self._entries) - 1

    def update(self, index: int, **changes: Any) -> LocatedEntry:
        """Replace fields of the entry at ``index``; each field may change independently."""
        self._check_index(index)
        updated = with_changes(self._entries[index], **changes)
        self._entries[index] = updated
        return updated

    def remove(self, index: int) -> LocatedEntry:
        self._check_index(index)
        return self._entries.pop(index)

    def replace(self, entries: Iterable[LocatedEntry]) -> None:
        """Swap the whole list in one step."""
        self._entries = list(entries)
