"""Collaborators around the point store: config, geocoding, CSV and persistence."""

from .config_loader import ConfigLoader, get_config
from .csv_codec import CSV_COLUMNS, CsvImportResult, entries_to_csv, import_csv, read_csv_rows
from .geocoding import GoogleGeocoder, resolve_many
from .persistence import FlatFileRepository
from .remote_store import AddressesClient

__all__ = [
    "ConfigLoader",
    "get_config",
    "CSV_COLUMNS",
    "CsvImportResult",
    "entries_to_csv",
    "import_csv",
    "read_csv_rows",
    "GoogleGeocoder",
    "resolve_many",
    "FlatFileRepository",
    "AddressesClient",
]
