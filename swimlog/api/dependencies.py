"""
FastAPI dependency injection.

Dependencies hand route handlers the repositories they work with.
All repositories live on the DataContext built once at startup (see
main.lifespan), so every request sees the same in-memory collections.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request

from ..config.settings import Settings, get_settings
from ..core.timing import Unit
from ..infrastructure.kvstore import DataContext, KeyValueStore, create_key_value_store
from ..infrastructure.kvstore.repositories import (
    EntryLogRepository,
    GroupRepository,
    StrokeRepository,
    SwimmerRepository,
    TeamRepository,
    TimeRepository,
    TrainingRepository,
    UnitPreferenceRepository,
)

logger = logging.getLogger(__name__)


def create_data_context(settings: Settings, store: Optional[KeyValueStore] = None) -> DataContext:
    """
    Build the data context from settings.

    A store passed in (tests do this) wins over the configured backend.
    """
    if store is None:
        store = create_key_value_store(
            data_dir=settings.storage_data_dir,
            mock_mode=settings.storage_mock_mode,
        )

    try:
        default_unit = Unit(settings.default_unit)
    except ValueError:
        logger.warning(
            "Unknown default unit, using meters",
            extra={"default_unit": settings.default_unit}
        )
        default_unit = Unit.METERS

    return DataContext(
        store,
        migration_enabled=settings.migration_enabled,
        default_unit=default_unit,
    )


# ---------------------------------------------------------------------------
# Repository Dependencies
# ---------------------------------------------------------------------------

def get_data_context(request: Request) -> DataContext:
    return request.app.state.data


def get_team_repository(data: Annotated[DataContext, Depends(get_data_context)]) -> TeamRepository:
    return data.teams


def get_group_repository(data: Annotated[DataContext, Depends(get_data_context)]) -> GroupRepository:
    return data.groups


def get_stroke_repository(data: Annotated[DataContext, Depends(get_data_context)]) -> StrokeRepository:
    return data.strokes


def get_swimmer_repository(data: Annotated[DataContext, Depends(get_data_context)]) -> SwimmerRepository:
    return data.swimmers


def get_time_repository(data: Annotated[DataContext, Depends(get_data_context)]) -> TimeRepository:
    return data.times


def get_training_repository(data: Annotated[DataContext, Depends(get_data_context)]) -> TrainingRepository:
    return data.trainings


def get_entry_log(data: Annotated[DataContext, Depends(get_data_context)]) -> EntryLogRepository:
    return data.entry_log


def get_unit_preference(data: Annotated[DataContext, Depends(get_data_context)]) -> UnitPreferenceRepository:
    return data.unit_preference


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
SettingsDep = Annotated[Settings, Depends(get_settings)]
DataContextDep = Annotated[DataContext, Depends(get_data_context)]
GroupRepositoryDep = Annotated[GroupRepository, Depends(get_group_repository)]
SwimmerRepositoryDep = Annotated[SwimmerRepository, Depends(get_swimmer_repository)]
TimeRepositoryDep = Annotated[TimeRepository, Depends(get_time_repository)]
TrainingRepositoryDep = Annotated[TrainingRepository, Depends(get_training_repository)]
EntryLogDep = Annotated[EntryLogRepository, Depends(get_entry_log)]
UnitPreferenceDep = Annotated[UnitPreferenceRepository, Depends(get_unit_preference)]
