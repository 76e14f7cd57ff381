"""
Training endpoints: CRUD plus embedded exercise editing.

Exercise bodies are stored as sent; only the parent training is
validated.
"""

from typing import Any

from fastapi import APIRouter, Body, HTTPException, status

from ..dependencies import TrainingRepositoryDep, get_training_repository
from .entities import add_crud_routes

router = APIRouter()


def _training_or_404(record):
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Training or exercise not found",
        )
    return record


@router.post(
    "/{training_id}/exercises",
    status_code=status.HTTP_201_CREATED,
    summary="Append an exercise",
)
async def add_exercise(
    training_id: str,
    trainings: TrainingRepositoryDep,
    exercise: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    return _training_or_404(await trainings.add_exercise(training_id, exercise))


@router.patch("/{training_id}/exercises/{exercise_id}", summary="Edit an exercise")
async def update_exercise(
    training_id: str,
    exercise_id: str,
    trainings: TrainingRepositoryDep,
    patch: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    return _training_or_404(await trainings.update_exercise(training_id, exercise_id, patch))


@router.delete("/{training_id}/exercises/{exercise_id}", summary="Remove an exercise")
async def remove_exercise(
    training_id: str,
    exercise_id: str,
    trainings: TrainingRepositoryDep,
) -> dict[str, Any]:
    return _training_or_404(await trainings.remove_exercise(training_id, exercise_id))


add_crud_routes(router, get_training_repository)
