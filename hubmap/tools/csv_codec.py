"""
CSV import and export of located entries.

Columns map one to one onto entry fields::

    address, tag, circleColor, dotColor, radius, numOfCars, showCircle

Blank or malformed cells fall back to defaults instead of rejecting the
row. A row is only dropped when its address cannot be geocoded.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

import pandas as pd

from ..store.entries import (
    DEFAULT_CIRCLE_COLOR,
    DEFAULT_DOT_COLOR,
    DEFAULT_RADIUS_M,
    LocatedEntry,
    parse_radius,
)
from .geocoding import DEFAULT_MAX_CONCURRENCY, resolve_many

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "address",
    "tag",
    "circleColor",
    "dotColor",
    "radius",
    "numOfCars",
    "showCircle",
]

FALSE_TOKEN = "false"
TRUE_TOKEN = "true"


@dataclass
class CsvImportResult:
    """Entries resolved from a CSV document."""

    entries: List[LocatedEntry] = field(default_factory=list)
    rows_read: int = 0

    @property
    def dropped(self) -> int:
        return self.rows_read - len(self.entries)


def read_csv_rows(text: str) -> List[Dict[str, str]]:
    """
    Parse CSV text into row dicts of raw strings.

    Missing columns read as empty strings. Empty input gives no rows.

    Raises:
        ValueError: If the text is not parseable as CSV
    """
    if not text or not text.strip():
        return []

    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError as exc:
        raise ValueError(f"Could not parse CSV: {exc}") from exc

    df = df.fillna("")
    df.columns = [str(c).strip() for c in df.columns]
    for column in CSV_COLUMNS:
        if column not in df.columns:
            df[column] = ""
    return df.to_dict(orient="records")


def row_to_fields(row: Dict[str, Any], *, default_radius: int = DEFAULT_RADIUS_M) -> Dict[str, Any]:
    """Map a raw CSV row onto entry keyword arguments (everything but the position)."""
    return {
        "address": str(row.get("address") or "").strip(),
        "tag": row.get("tag") or "",
        "circle_color": row.get("circleColor") or DEFAULT_CIRCLE_COLOR,
        "dot_color": row.get("dotColor") or DEFAULT_DOT_COLOR,
        "radius": parse_radius(row.get("radius"), default=default_radius),
        "num_of_cars": row.get("numOfCars") or "",
        "show_circle": row.get("showCircle") != FALSE_TOKEN,
    }


async def import_csv(
    text: str,
    geocoder,
    *,
    default_radius: int = DEFAULT_RADIUS_M,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> CsvImportResult:
    """
    Parse CSV text and geocode every row.

    All lookups settle before anything is returned, so the caller can swap
    the result into the store in one step. Rows whose address does not
    resolve are dropped; the others keep their CSV order.

    Args:
        text: CSV document
        geocoder: Object with an async ``resolve(address)`` method
        default_radius: Radius for rows with a blank or unusable radius
        max_concurrency: Maximum lookups in flight

    Returns:
        The resolved entries and the number of rows read

    Raises:
        ValueError: If the CSV cannot be parsed
    """
    rows = [row_to_fields(r, default_radius=default_radius) for r in read_csv_rows(text)]
    positions = await resolve_many(
        geocoder, [r["address"] for r in rows], max_concurrency=max_concurrency
    )

    entries: List[LocatedEntry] = []
    for row, position in zip(rows, positions):
        if position is None:
            continue
        entries.append(LocatedEntry(position=position, **row))

    result = CsvImportResult(entries=entries, rows_read=len(rows))
    if result.dropped:
        logger.warning(
            "CSV import dropped %d of %d rows that could not be geocoded", result.dropped, len(rows)
        )
    logger.info("CSV import resolved %d entries", len(entries))
    return result


def _format_radius(radius: Any) -> Any:
    if not radius:
        return DEFAULT_RADIUS_M
    if isinstance(radius, float) and radius.is_integer():
        return int(radius)
    return radius


def entries_to_csv(entries: Sequence[LocatedEntry]) -> str:
    """Write entries as CSV text (header only when there are no entries)."""
    rows = [
        {
            "address": entry.address,
            "tag": entry.tag or "",
            "circleColor": entry.circle_color or DEFAULT_CIRCLE_COLOR,
            "dotColor": entry.dot_color or DEFAULT_DOT_COLOR,
            "radius": str(_format_radius(entry.radius)),
            "numOfCars": "" if entry.num_of_cars is None else entry.num_of_cars,
            "showCircle": TRUE_TOKEN if entry.show_circle is not False else FALSE_TOKEN,
        }
        for entry in entries
    ]
    df = pd.DataFrame(rows, columns=CSV_COLUMNS)
    return df.to_csv(index=False)
