"""
Swimmer endpoints: CRUD plus membership and name lookups.
"""

from typing import Any

from fastapi import APIRouter, HTTPException, status

from ..dependencies import SwimmerRepositoryDep, get_swimmer_repository
from .entities import add_crud_routes

router = APIRouter()


@router.get("/by-team/{team_id}", summary="Swimmers on a team")
async def swimmers_by_team(team_id: str, swimmers: SwimmerRepositoryDep) -> list[dict[str, Any]]:
    return swimmers.get_swimmers_by_team(team_id)


@router.get("/by-group/{group_id}", summary="Swimmers in a group")
async def swimmers_by_group(group_id: str, swimmers: SwimmerRepositoryDep) -> list[dict[str, Any]]:
    return swimmers.get_swimmers_by_group(group_id)


@router.get("/by-name/{name}", summary="Find a swimmer by name (case-insensitive)")
async def swimmer_by_name(name: str, swimmers: SwimmerRepositoryDep) -> dict[str, Any]:
    swimmer = swimmers.get_swimmer_by_name(name)
    if swimmer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Swimmer not found")
    return swimmer


add_crud_routes(router, get_swimmer_repository)
