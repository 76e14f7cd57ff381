"""
Distance unit preference (meters or yards), stored as a plain string.
"""

import logging

from ....core.entities.models import StorageKey
from ....core.timing import Unit, distance_options
from ..client import KeyValueStore, StorageError

logger = logging.getLogger(__name__)


class UnitPreferenceRepository:
    """Loads and persists the unit used by distance pickers."""

    def __init__(self, store: KeyValueStore, default: Unit = Unit.METERS) -> None:
        self._store = store
        self._unit = default
        self._is_loading = True

    @property
    def unit(self) -> Unit:
        return self._unit

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def is_meters(self) -> bool:
        return self._unit is Unit.METERS

    @property
    def is_yards(self) -> bool:
        return self._unit is Unit.YARDS

    @property
    def distance_options(self) -> tuple[str, ...]:
        return distance_options(self._unit)

    async def load(self) -> Unit:
        """Read the stored unit; keep the default if absent or unreadable."""
        try:
            saved = await self._store.get(StorageKey.UNIT_PREFERENCE.value)
        except StorageError as e:
            logger.error("Failed to load unit preference", extra={"error": str(e)})
            saved = None
        finally:
            self._is_loading = False

        if saved:
            try:
                self._unit = Unit(saved)
            except ValueError:
                logger.warning(
                    "Ignoring unknown stored unit",
                    extra={"stored_value": saved}
                )
        return self._unit

    async def set_unit(self, value: str) -> bool:
        """Persist ``"m"`` or ``"y"``. Anything else is rejected."""
        try:
            unit = Unit(value)
        except ValueError:
            return False

        try:
            await self._store.set(StorageKey.UNIT_PREFERENCE.value, unit.value)
        except StorageError as e:
            logger.error("Failed to save unit preference", extra={"error": str(e)})
            return False

        self._unit = unit
        return True
