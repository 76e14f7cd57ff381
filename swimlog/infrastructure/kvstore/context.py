"""
Application data context.

Owns one repository per entity kind, the entry log, the unit preference,
and the migration service, all over a single key-value store. Startup
order matters: the migration runs first so that repositories load the
migrated collections rather than the pre-migration ones.
"""

import logging
from typing import Optional

from ...core.timing import Unit
from .client import KeyValueStore
from .migration import MigrationService
from .repositories import (
    EntityRepository,
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


class DataContext:
    """Everything the screens read and write, loaded once at startup."""

    def __init__(
        self,
        store: KeyValueStore,
        migration_enabled: bool = True,
        default_unit: Unit = Unit.METERS,
    ) -> None:
        self.store = store
        self.teams = TeamRepository(store)
        self.groups = GroupRepository(store)
        self.strokes = StrokeRepository(store)
        self.swimmers = SwimmerRepository(store)
        self.times = TimeRepository(store)
        self.trainings = TrainingRepository(store)
        self.entry_log = EntryLogRepository(store)
        self.unit_preference = UnitPreferenceRepository(store, default=default_unit)
        self.migration = MigrationService(store)

        self._migration_enabled = migration_enabled
        self._migration_complete = False
        self._migrated: Optional[bool] = None

    @property
    def repositories(self) -> dict[str, EntityRepository]:
        """Entity repositories by storage key."""
        repos = (self.teams, self.groups, self.strokes, self.swimmers, self.times, self.trainings)
        return {repo.storage_key: repo for repo in repos}

    @property
    def migration_complete(self) -> bool:
        return self._migration_complete

    @property
    def migrated(self) -> Optional[bool]:
        """Result of this start's migration run; None if it hasn't run."""
        return self._migrated

    @property
    def is_loading(self) -> bool:
        return (
            not self._migration_complete
            or any(repo.is_loading for repo in self.repositories.values())
        )

    async def start(self) -> None:
        """Run the migration (if enabled), then load every collection."""
        if self._migration_enabled:
            self._migrated = await self.migration.run_if_needed()
        self._migration_complete = True

        for repo in self.repositories.values():
            await repo.load()
        await self.entry_log.load()
        await self.unit_preference.load()

        logger.info(
            "Data context started",
            extra={
                "migrated": self._migrated,
                "counts": {key: repo.count for key, repo in self.repositories.items()},
            }
        )

    async def migration_version(self) -> Optional[str]:
        return await self.migration.get_migration_version()
