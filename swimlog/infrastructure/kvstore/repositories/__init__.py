"""
Repository implementations over the key-value store.

Repositories translate between stored JSON collections and the records
the screens work with.
"""

from .base import EntityRepository
from .entities import (
    GroupRepository,
    StrokeRepository,
    SwimmerRepository,
    TeamRepository,
    TimeRepository,
    TrainingRepository,
)
from .entries import EntryLogRepository, EntryRejection
from .preferences import UnitPreferenceRepository

__all__ = [
    "EntityRepository",
    "EntryLogRepository",
    "EntryRejection",
    "GroupRepository",
    "StrokeRepository",
    "SwimmerRepository",
    "TeamRepository",
    "TimeRepository",
    "TrainingRepository",
    "UnitPreferenceRepository",
]
