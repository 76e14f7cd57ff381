"""
Practice log endpoints.

The flat entry log predates swimmers and times; the quick-entry screen
still writes to it. Unit preference lives here too because it only
drives the distance picker on that screen.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from ...core.timing import EFFORT_OPTIONS, format_time
from ...infrastructure.kvstore.repositories import EntryRejection
from ..dependencies import EntryLogDep, UnitPreferenceDep

logger = logging.getLogger(__name__)

router = APIRouter()

_REJECTION_DETAILS = {
    EntryRejection.MISSING_FIELDS: "Please fill in all fields",
    EntryRejection.INVALID_TIME: "Please enter a valid time (e.g., 25.340 or 1:03.450)",
}


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class EntryRequest(BaseModel):
    """A rep typed into the quick-entry form."""
    name: str = Field(default="", description="Swimmer name")
    stroke: str = Field(default="", description="Stroke name")
    distance: str = Field(default="", description="Distance as shown in the picker")
    effort: Optional[str] = Field(default=None, description="Effort, e.g. '80%'")
    best_time: str = Field(default="", description="Best time, '25.340' or '1:03.450'")


class UnitRequest(BaseModel):
    unit: str = Field(description="'m' for meters or 'y' for yards")


class UnitResponse(BaseModel):
    unit: str
    is_meters: bool
    is_yards: bool
    distances: list[str]
    efforts: list[str]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/log", summary="Logged entries (newest first)")
async def list_entries(entry_log: EntryLogDep) -> list[dict[str, Any]]:
    return entry_log.entries


@router.post("/log", status_code=status.HTTP_201_CREATED, summary="Log a rep")
async def add_entry(request: EntryRequest, entry_log: EntryLogDep) -> dict[str, Any]:
    entry, rejection = await entry_log.add_entry(
        name=request.name,
        stroke=request.stroke,
        distance=request.distance,
        effort=request.effort,
        best_time_input=request.best_time,
    )

    if rejection is EntryRejection.NOT_SAVED:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Entry could not be saved",
        )
    if rejection is not None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=_REJECTION_DETAILS[rejection],
        )

    logger.info(
        "Entry logged",
        extra={"entry_id": entry["id"], "result_time": format_time(entry["resultSeconds"])}
    )
    return entry


@router.delete("/log", status_code=status.HTTP_204_NO_CONTENT, summary="Delete every entry")
async def clear_entries(entry_log: EntryLogDep) -> None:
    if not await entry_log.clear():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to clear entries",
        )


def _unit_response(preference) -> UnitResponse:
    return UnitResponse(
        unit=preference.unit.value,
        is_meters=preference.is_meters,
        is_yards=preference.is_yards,
        distances=list(preference.distance_options),
        efforts=list(EFFORT_OPTIONS),
    )


@router.get("/preferences/unit", response_model=UnitResponse, summary="Current distance unit")
async def get_unit(preference: UnitPreferenceDep) -> UnitResponse:
    return _unit_response(preference)


@router.put("/preferences/unit", response_model=UnitResponse, summary="Change distance unit")
async def set_unit(request: UnitRequest, preference: UnitPreferenceDep) -> UnitResponse:
    if not await preference.set_unit(request.unit):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Unit must be 'm' or 'y'",
        )
    return _unit_response(preference)
