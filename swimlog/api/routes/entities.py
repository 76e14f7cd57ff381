"""
CRUD endpoints shared by every entity kind.

Each entity router gets the same six routes. Request bodies are plain
JSON objects: validation belongs to the repository, so a payload the
repository rejects comes back as 422 rather than being filtered by a
request schema first.
"""

import logging
from typing import Any, Callable

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status

from ...infrastructure.kvstore.repositories import EntityRepository
from ..dependencies import (
    GroupRepositoryDep,
    get_group_repository,
    get_stroke_repository,
    get_team_repository,
)

logger = logging.getLogger(__name__)


def add_crud_routes(router: APIRouter, get_repository: Callable[..., EntityRepository]) -> APIRouter:
    """
    Attach list/get/create/update/delete/reload routes to router.

    Call this after the router's own routes so fixed paths like
    ``/best`` are matched before ``/{entity_id}``.
    """

    @router.get("", summary="List records (newest first)")
    async def list_entities(
        repository: EntityRepository = Depends(get_repository),
    ) -> list[dict[str, Any]]:
        return repository.entities

    @router.post("/reload", summary="Re-read the collection from storage")
    async def reload_entities(
        repository: EntityRepository = Depends(get_repository),
    ) -> list[dict[str, Any]]:
        return await repository.reload()

    @router.get("/{entity_id}", summary="Get one record")
    async def get_entity(
        entity_id: str,
        repository: EntityRepository = Depends(get_repository),
    ) -> dict[str, Any]:
        record = repository.get_by_id(entity_id)
        if record is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
        return record

    @router.post("", status_code=status.HTTP_201_CREATED, summary="Create a record")
    async def create_entity(
        data: dict[str, Any] = Body(...),
        repository: EntityRepository = Depends(get_repository),
    ) -> dict[str, Any]:
        record = await repository.add(data)
        if record is None:
            logger.warning(
                "Create rejected",
                extra={"storage_key": repository.storage_key}
            )
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Record rejected",
            )
        return record

    @router.patch("/{entity_id}", summary="Merge fields into a record")
    async def update_entity(
        entity_id: str,
        patch: dict[str, Any] = Body(...),
        repository: EntityRepository = Depends(get_repository),
    ) -> dict[str, Any]:
        if repository.get_by_id(entity_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")

        record = await repository.update(entity_id, patch)
        if record is None:
            logger.warning(
                "Update rejected",
                extra={"storage_key": repository.storage_key, "entity_id": entity_id}
            )
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Update rejected",
            )
        return record

    @router.delete("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a record")
    async def delete_entity(
        entity_id: str,
        repository: EntityRepository = Depends(get_repository),
    ) -> Response:
        if not await repository.remove(entity_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


teams_router = add_crud_routes(APIRouter(), get_team_repository)
strokes_router = add_crud_routes(APIRouter(), get_stroke_repository)

groups_router = APIRouter()


@groups_router.get("/by-team/{team_id}", summary="Groups belonging to a team")
async def groups_by_team(team_id: str, groups: GroupRepositoryDep) -> list[dict[str, Any]]:
    return groups.get_groups_by_team(team_id)


add_crud_routes(groups_router, get_group_repository)
