"""
Time endpoints: CRUD plus per-swimmer/stroke listings and best times.
"""

from typing import Any

from fastapi import APIRouter, HTTPException, Query, status

from ..dependencies import TimeRepositoryDep, get_time_repository
from .entities import add_crud_routes

router = APIRouter()


@router.get("/best", summary="Best time for a swimmer, stroke, and distance")
async def best_time(
    times: TimeRepositoryDep,
    swimmer_id: str = Query(..., alias="swimmerId"),
    stroke_id: str = Query(..., alias="strokeId"),
    distance: str = Query(...),
) -> dict[str, Any]:
    """
    Distance is matched exactly as stored, so "100" and "100m" are
    different distances.
    """
    best = times.get_best_time(swimmer_id, stroke_id, distance)
    if best is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No matching times")
    return best


@router.get("/by-swimmer/{swimmer_id}", summary="Times for a swimmer")
async def times_by_swimmer(swimmer_id: str, times: TimeRepositoryDep) -> list[dict[str, Any]]:
    return times.get_times_by_swimmer(swimmer_id)


@router.get("/by-stroke/{stroke_id}", summary="Times for a stroke")
async def times_by_stroke(stroke_id: str, times: TimeRepositoryDep) -> list[dict[str, Any]]:
    return times.get_times_by_stroke(stroke_id)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT, summary="Delete every time")
async def clear_times(times: TimeRepositoryDep) -> None:
    if not await times.clear():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not clear times",
        )


add_crud_routes(router, get_time_repository)
