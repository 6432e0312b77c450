"""Pydantic models for the hub map HTTP service."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from hubmap.spatial import ClickAggregate, HubCluster
from hubmap.store import (
    DEFAULT_CIRCLE_COLOR,
    DEFAULT_DOT_COLOR,
    DEFAULT_RADIUS_M,
    LocatedEntry,
    Position,
)

RawCount = Optional[Union[int, float, str]]


class LatLng(BaseModel):
    """Simple latitude/longitude container."""

    lat: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    lng: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")


class AddressRecord(BaseModel):
    """One plotted address in the persisted record layout."""

    address: str = ""
    coordinates: LatLng
    radius: float = Field(DEFAULT_RADIUS_M, ge=0, description="Radius in meters")
    circle_color: str = Field(DEFAULT_CIRCLE_COLOR, alias="circleColor")
    dot_color: str = Field(DEFAULT_DOT_COLOR, alias="dotColor")
    tag: Optional[str] = ""
    num_of_cars: RawCount = Field("", alias="numOfCars")
    show_circle: bool = Field(True, alias="showCircle")

    model_config = {"populate_by_name": True, "extra": "allow"}

    def to_entry(self) -> LocatedEntry:
        return LocatedEntry(
            address=self.address,
            position=Position(lat=self.coordinates.lat, lng=self.coordinates.lng),
            radius=self.radius,
            num_of_cars="" if self.num_of_cars is None else self.num_of_cars,
            tag=self.tag or "",
            circle_color=self.circle_color,
            dot_color=self.dot_color,
            show_circle=self.show_circle,
            extra=dict(self.model_extra or {}),
        )

    @classmethod
    def from_entry(cls, entry: LocatedEntry) -> "AddressRecord":
        return cls(
            address=entry.address,
            coordinates=LatLng(lat=entry.lat, lng=entry.lng),
            radius=entry.radius,
            circle_color=entry.circle_color,
            dot_color=entry.dot_color,
            tag=entry.tag,
            num_of_cars=entry.num_of_cars,
            show_circle=entry.show_circle,
            **entry.extra,
        )


class SaveResponse(BaseModel):
    message: str


class AddAddressRequest(BaseModel):
    address: str = Field(..., min_length=1, description="Address text to geocode")
    radius: Optional[float] = Field(default=None, ge=0, description="Radius in meters")
    circle_color: Optional[str] = Field(default=None, alias="circleColor")
    dot_color: Optional[str] = Field(default=None, alias="dotColor")
    tag: str = ""
    num_of_cars: RawCount = Field("", alias="numOfCars")
    show_circle: bool = Field(True, alias="showCircle")

    model_config = {"populate_by_name": True}


class EditEntryRequest(BaseModel):
    """Fields left out of the request stay unchanged."""

    index: int = Field(..., ge=0)
    address: Optional[str] = None
    coordinates: Optional[LatLng] = None
    radius: Optional[float] = Field(default=None, ge=0)
    circle_color: Optional[str] = Field(default=None, alias="circleColor")
    dot_color: Optional[str] = Field(default=None, alias="dotColor")
    tag: Optional[str] = None
    num_of_cars: RawCount = Field(default=None, alias="numOfCars")
    show_circle: Optional[bool] = Field(default=None, alias="showCircle")

    model_config = {"populate_by_name": True}

    def entry_changes(self) -> Dict[str, Any]:
        """Entry field changes for the fields actually sent."""
        sent = self.model_dump(exclude_unset=True, exclude={"index", "coordinates"})
        if "num_of_cars" in sent and sent["num_of_cars"] is None:
            sent["num_of_cars"] = ""
        changes = {k: v for k, v in sent.items() if v is not None or k == "num_of_cars"}
        if self.coordinates is not None:
            changes["position"] = Position(lat=self.coordinates.lat, lng=self.coordinates.lng)
        return changes


class ImportCsvRequest(BaseModel):
    csv_text: str = Field(..., alias="csvText", description="CSV document to import")

    model_config = {"populate_by_name": True}


class ImportCsvResponse(BaseModel):
    imported: int
    dropped: int
    entries: List[AddressRecord]


class HubsRequest(BaseModel):
    threshold: Optional[Union[float, str]] = Field(
        default=None, description="Car count a hub must exceed; blank disables hubs"
    )


class HubSummary(BaseModel):
    centroid: LatLng
    member_indices: List[int] = Field(default_factory=list, alias="memberIndices")
    total_count: int = Field(..., alias="totalCount")
    size: int

    model_config = {"populate_by_name": True}

    @classmethod
    def from_cluster(cls, hub: HubCluster) -> "HubSummary":
        return cls(
            centroid=LatLng(lat=hub.centroid_lat, lng=hub.centroid_lng),
            member_indices=hub.member_indices,
            total_count=hub.total_count,
            size=hub.size,
        )


class HubsResponse(BaseModel):
    threshold: Optional[float] = None
    hubs: List[HubSummary]


class ProbeRequest(LatLng):
    pass


class ProbeAggregate(BaseModel):
    position: LatLng
    total_count: int = Field(..., alias="totalCount")
    member_indices: List[int] = Field(default_factory=list, alias="memberIndices")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_aggregate(cls, aggregate: ClickAggregate) -> "ProbeAggregate":
        return cls(
            position=LatLng(lat=aggregate.lat, lng=aggregate.lng),
            total_count=aggregate.total_count,
            member_indices=aggregate.member_indices,
        )


class ProbeResponse(BaseModel):
    aggregate: Optional[ProbeAggregate] = None


class RadiusOverrideRequest(BaseModel):
    radius: Optional[Union[float, str]] = Field(default=None, description="Radius applied to every entry")


class RadiusOverrideResponse(BaseModel):
    applied: bool
    entries: List[AddressRecord]
