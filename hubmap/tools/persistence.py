"""Whole-list JSON file persistence for located entries."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Sequence, Union

from ..store.entries import LocatedEntry, entries_from_records, entry_to_record

logger = logging.getLogger(__name__)


class FlatFileRepository:
    """
    Store the entry list as one JSON array on disk.

    Reads and writes always cover the whole list: no partial updates, no
    versioning, the last writer wins.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.ensure_exists()

    def ensure_exists(self) -> None:
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("[]", encoding="utf-8")

    def load_records(self) -> List[dict]:
        """Raw records from disk; an unreadable file yields an empty list."""
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.error("Error reading %s: %s", self.path, exc)
            return []

        if not isinstance(data, list):
            logger.error("Error reading %s: expected a JSON array, got %s", self.path, type(data).__name__)
            return []
        return data

    def load(self) -> List[LocatedEntry]:
        records = self.load_records()
        entries = entries_from_records(records)
        skipped = len(records) - len(entries)
        if skipped:
            logger.warning("Skipped %d stored records without coordinates", skipped)
        return entries

    def save(self, entries: Sequence[LocatedEntry]) -> None:
        """
        Replace the stored list.

        Raises:
            OSError: If the file cannot be written
        """
        payload = json.dumps([entry_to_record(e) for e in entries], indent=2)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.error("Error writing %s: %s", self.path, exc)
            raise
