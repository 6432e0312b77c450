"""FastAPI service persisting the address list and serving hub map actions."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hubmap.store import LocatedEntry
from hubmap.tools import entries_to_csv, get_config

from .schemas.models import (
    AddAddressRequest,
    AddressRecord,
    EditEntryRequest,
    HubsRequest,
    HubsResponse,
    HubSummary,
    ImportCsvRequest,
    ImportCsvResponse,
    ProbeAggregate,
    ProbeRequest,
    ProbeResponse,
    RadiusOverrideRequest,
    RadiusOverrideResponse,
    SaveResponse,
)
from .tools.service import MapService, get_service

load_dotenv()

logger = logging.getLogger(__name__)

app = FastAPI(title="Hub Map Server", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

SAVE_FAILED = {"message": "Failed to save data"}
SAVE_OK = {"message": "Data saved successfully"}


def _records(entries: List[LocatedEntry]) -> List[Dict[str, Any]]:
    return [AddressRecord.from_entry(e).model_dump(by_alias=True) for e in entries]


def _persist(service: MapService) -> JSONResponse | None:
    """Write the list back; on failure return the 500 response to send instead."""
    try:
        service.persist()
    except OSError as exc:
        logger.error("Error writing file: %s", exc)
        return JSONResponse(status_code=500, content=SAVE_FAILED)
    return None


@app.get("/health")
async def health_check() -> Dict[str, str]:
    return {"status": "ok"}


# -----------------------------
# Whole-list persistence
# -----------------------------

@app.get("/addresses")
async def load_addresses(service: MapService = Depends(get_service)) -> List[Dict[str, Any]]:
    return _records(service.controller.entries)


@app.post("/addresses")
async def save_addresses(
    records: List[AddressRecord],
    service: MapService = Depends(get_service),
):
    service.controller.load([record.to_entry() for record in records])
    failure = _persist(service)
    if failure is not None:
        return failure
    return SaveResponse(**SAVE_OK).model_dump()


@app.delete("/addresses/{index}")
async def remove_address(index: int, service: MapService = Depends(get_service)):
    try:
        service.controller.remove_entry(index)
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    failure = _persist(service)
    if failure is not None:
        return failure
    return {"entries": _records(service.controller.entries)}


# -----------------------------
# Store actions
# -----------------------------

@app.post("/actions/add_address")
async def add_address_action(
    request: AddAddressRequest,
    service: MapService = Depends(get_service),
):
    try:
        position = await service.geocoder.resolve(request.address)
    except RuntimeError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    if position is None:
        raise HTTPException(status_code=404, detail="No coordinates found for the given address.")

    entry = LocatedEntry(
        address=request.address,
        position=position,
        radius=request.radius if request.radius is not None else service.default_radius,
        num_of_cars="" if request.num_of_cars is None else request.num_of_cars,
        tag=request.tag,
        circle_color=request.circle_color or service.default_circle_color or "red",
        dot_color=request.dot_color or service.default_dot_color or "black",
        show_circle=request.show_circle,
    )
    index = service.controller.add_entry(entry)

    failure = _persist(service)
    if failure is not None:
        return failure
    return {
        "index": index,
        "entry": AddressRecord.from_entry(entry).model_dump(by_alias=True),
    }


@app.post("/actions/edit_entry")
async def edit_entry_action(
    request: EditEntryRequest,
    service: MapService = Depends(get_service),
):
    try:
        updated = service.controller.edit_entry(request.index, **request.entry_changes())
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    failure = _persist(service)
    if failure is not None:
        return failure
    return {"index": request.index, "entry": AddressRecord.from_entry(updated).model_dump(by_alias=True)}


@app.post("/actions/import_csv")
async def import_csv_action(
    request: ImportCsvRequest,
    service: MapService = Depends(get_service),
):
    try:
        result = await service.import_csv(request.csv_text)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except RuntimeError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    failure = _persist(service)
    if failure is not None:
        return failure

    response = ImportCsvResponse(
        imported=len(result.entries),
        dropped=result.dropped,
        entries=[AddressRecord.from_entry(e) for e in result.entries],
    )
    return response.model_dump(by_alias=True)


@app.get("/actions/export_csv")
async def export_csv_action(service: MapService = Depends(get_service)) -> Response:
    entries = service.controller.entries
    if not entries:
        return Response(status_code=204)
    return Response(
        content=entries_to_csv(entries),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="addresses.csv"'},
    )


@app.post("/actions/radius_override")
async def radius_override_action(
    request: RadiusOverrideRequest,
    service: MapService = Depends(get_service),
):
    applied = service.controller.set_radius_override(request.radius)
    if applied:
        failure = _persist(service)
        if failure is not None:
            return failure

    response = RadiusOverrideResponse(
        applied=applied,
        entries=[AddressRecord.from_entry(e) for e in service.controller.entries],
    )
    return response.model_dump(by_alias=True)


# -----------------------------
# Hubs and probes
# -----------------------------

@app.post("/actions/hubs")
async def hubs_action(
    request: HubsRequest,
    service: MapService = Depends(get_service),
) -> Dict[str, Any]:
    try:
        hubs = service.controller.set_threshold(request.threshold)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    response = HubsResponse(
        threshold=service.controller.threshold,
        hubs=[HubSummary.from_cluster(hub) for hub in hubs],
    )
    return response.model_dump(by_alias=True)


@app.post("/actions/probe")
async def probe_action(
    request: ProbeRequest,
    service: MapService = Depends(get_service),
) -> Dict[str, Any]:
    aggregate = service.controller.probe(request.lat, request.lng)
    response = ProbeResponse(
        aggregate=ProbeAggregate.from_aggregate(aggregate) if aggregate is not None else None
    )
    return response.model_dump(by_alias=True)


def run() -> None:
    """Serve the app with uvicorn on the profile port (``PORT`` overrides it)."""
    import uvicorn

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO
    )
    port = int(get_config().get("server", {}).get("port", 5000))
    logger.info("Server running on http://localhost:%d", port)
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    run()


__all__ = ["app", "run"]
