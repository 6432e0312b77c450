"""Server-side state: one controller, its repository and the geocoder."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from hubmap.controller import MapController
from hubmap.store import DEFAULT_RADIUS_M
from hubmap.tools import CsvImportResult, FlatFileRepository, GoogleGeocoder, get_config, import_csv
from hubmap.tools.geocoding import DEFAULT_MAX_CONCURRENCY

logger = logging.getLogger(__name__)


class MapService:
    """Bundle the controller with the collaborators that feed it."""

    def __init__(
        self,
        controller: MapController,
        repository: FlatFileRepository,
        geocoder,
        *,
        default_radius: int = DEFAULT_RADIUS_M,
        default_circle_color: Optional[str] = None,
        default_dot_color: Optional[str] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ):
        self.controller = controller
        self.repository = repository
        self.geocoder = geocoder
        self.default_radius = default_radius
        self.default_circle_color = default_circle_color
        self.default_dot_color = default_dot_color
        self.max_concurrency = max_concurrency

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "MapService":
        storage_cfg = config.get("storage", {}) or {}
        entries_cfg = config.get("entries", {}) or {}
        hubs_cfg = config.get("hubs", {}) or {}
        geo_cfg = config.get("geocoding", {}) or {}

        repository = FlatFileRepository(Path(storage_cfg.get("data_file", "data.json")))
        controller = MapController(threshold=hubs_cfg.get("threshold"))
        controller.load(repository.load())
        logger.info("Loaded %d entries from %s", len(controller.store), repository.path)

        return cls(
            controller,
            repository,
            GoogleGeocoder.from_config(config),
            default_radius=entries_cfg.get("default_radius_m", DEFAULT_RADIUS_M),
            default_circle_color=entries_cfg.get("default_circle_color"),
            default_dot_color=entries_cfg.get("default_dot_color"),
            max_concurrency=geo_cfg.get("max_concurrency", DEFAULT_MAX_CONCURRENCY),
        )

    def persist(self) -> None:
        """
        Write the whole list back to the repository.

        Raises:
            OSError: If the write fails (in-memory state is kept)
        """
        self.repository.save(self.controller.entries)

    async def import_csv(self, text: str) -> CsvImportResult:
        """Resolve a CSV document and replace the store with the result."""
        result = await import_csv(
            text,
            self.geocoder,
            default_radius=self.default_radius,
            max_concurrency=self.max_concurrency,
        )
        self.controller.import_entries(result.entries)
        return result


_service: Optional[MapService] = None


def get_service() -> MapService:
    """FastAPI dependency returning the process-wide service, created on first use."""
    global _service
    if _service is None:
        _service = MapService.from_config(get_config())
    return _service
