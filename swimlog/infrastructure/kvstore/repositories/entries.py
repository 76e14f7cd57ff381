"""
Repository for the flat practice entry log.

This is the original storage format: one record per logged rep, with
the swimmer and stroke as free text. Migration reads it to build
normalized swimmers and times but never modifies it, and the log stays
usable on its own.
"""

import copy
import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from ....core.entities.models import Record, StorageKey, now_ms
from ....core.timing import (
    calculate_result_time,
    format_time,
    parse_effort,
    parse_time_input,
)
from ..client import KeyValueStore, StorageError, load_entities, save_entities

logger = logging.getLogger(__name__)


class EntryRejection(Enum):
    """Why an entry was not logged. The screen turns these into messages."""
    MISSING_FIELDS = "missing_fields"
    INVALID_TIME = "invalid_time"
    NOT_SAVED = "not_saved"


class EntryLogRepository:
    """
    The practice entry log, newest first.

    Entries are keyed by their creation time in epoch milliseconds.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._entries: list[Record] = []
        self._is_loading = True

    @property
    def entries(self) -> list[Record]:
        return copy.deepcopy(self._entries)

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def count(self) -> int:
        return len(self._entries)

    async def load(self) -> list[Record]:
        try:
            self._entries = await load_entities(self._store, StorageKey.LEGACY_ENTRIES)
        except StorageError as e:
            logger.error("Failed to load entry log", extra={"error": str(e)})
            self._entries = []
        finally:
            self._is_loading = False
        return self.entries

    async def add_entry(
        self,
        name: str,
        stroke: str,
        distance: str,
        effort: Optional[str],
        best_time_input: str,
    ) -> tuple[Optional[Record], Optional[EntryRejection]]:
        """
        Log one rep.

        The result time is the best time scaled by effort (80% if the
        effort can't be read). Returns ``(entry, None)`` on success or
        ``(None, reason)`` when the entry was not logged.
        """
        if not name or not stroke or not distance or not best_time_input:
            return None, EntryRejection.MISSING_FIELDS

        best_seconds = parse_time_input(best_time_input)
        if best_seconds is None:
            return None, EntryRejection.INVALID_TIME

        result_seconds = calculate_result_time(best_seconds, parse_effort(effort))

        entry_id = now_ms()
        taken = {e.get("id") for e in self._entries}
        while entry_id in taken:
            entry_id += 1

        entry = {
            "id": entry_id,
            "timestamp": datetime.now().isoformat(timespec="seconds"),
            "name": name,
            "stroke": stroke,
            "distance": distance,
            "effort": effort,
            "bestTime": format_time(best_seconds),
            "resultTime": format_time(result_seconds),
            "bestSeconds": best_seconds,
            "resultSeconds": result_seconds,
        }

        updated = [entry, *self._entries]
        try:
            await save_entities(self._store, StorageKey.LEGACY_ENTRIES, updated)
        except StorageError as e:
            logger.error("Failed to save entry log", extra={"error": str(e)})
            return None, EntryRejection.NOT_SAVED

        self._entries = updated
        logger.debug("Logged entry", extra={"entry_id": entry_id})
        return copy.deepcopy(entry), None

    async def clear(self) -> bool:
        """Delete every entry. Confirmation is the caller's job."""
        try:
            await save_entities(self._store, StorageKey.LEGACY_ENTRIES, [])
        except StorageError as e:
            logger.error("Failed to clear entry log", extra={"error": str(e)})
            return False

        self._entries = []
        return True
