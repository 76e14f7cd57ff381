"""
One-time migration from the flat entry log to normalized entities.

Legacy entries name their swimmer and stroke in free text. Migration
creates one Swimmer per distinct name, resolves stroke names against
the Stroke collection, and emits a Time per entry that resolves on both
sides. Entries that don't resolve are dropped: losing an unreadable rep
is preferred over blocking the app on startup.

Completion is recorded by writing a version marker, and that write is
always the last one. If anything fails before it, the marker stays
unset and the next start reprocesses the log from scratch. Because
steps are not checkpointed, a failure after the swimmer write but before
the marker can leave duplicate swimmers after the retry.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional

from ...core.entities.models import (
    EntityKind,
    Record,
    StorageKey,
    entity_type_for,
    generate_id,
    now_ms,
)
from .client import KeyValueStore, StorageError, load_entities, save_entities

logger = logging.getLogger(__name__)

CURRENT_MIGRATION_VERSION = "1"


@dataclass
class MigrationResult:
    """Entities produced from the legacy log, plus what was left behind."""
    swimmers: list[Record] = field(default_factory=list)
    times: list[Record] = field(default_factory=list)
    dropped_entries: int = 0


def _lookup_key(value: Any) -> Optional[str]:
    # Lower-cased only; padded names do not match
    if not isinstance(value, str):
        return None
    return value.lower()


def build_stroke_map(strokes: Iterable[Record]) -> dict[str, str]:
    """Lower-cased stroke name -> stroke id."""
    return {
        _lookup_key(stroke["name"]): stroke["id"]
        for stroke in strokes
        if _lookup_key(stroke.get("name"))
    }


def extract_swimmer_names(entries: Iterable[Record]) -> list[str]:
    """
    Distinct trimmed, non-empty names in first-seen order.

    Distinctness is case-sensitive: "Ana" and "ana" are two names.
    """
    names: dict[str, None] = {}
    for entry in entries:
        name = entry.get("name")
        if isinstance(name, str) and name.strip():
            names.setdefault(name.strip(), None)
    return list(names)


def migrate_legacy_entries(
    legacy_entries: list[Record],
    strokes: list[Record],
) -> MigrationResult:
    """
    Convert legacy entries into new Swimmer and Time records.

    Pure: no I/O, ids are generated here. A swimmer is created for every
    distinct name even if none of that swimmer's entries end up as
    times. Names that differ only by case produce separate swimmers, but
    entries resolve to the last of them. Lookups ignore case but not
    surrounding whitespace, so a padded name or stroke is dropped.
    """
    if not legacy_entries:
        return MigrationResult()

    stroke_map = build_stroke_map(strokes)

    swimmers = [
        {
            "id": generate_id(),
            "name": name,
            "teamIds": [],
            "groupIds": [],
            "createdAt": now_ms(),
        }
        for name in extract_swimmer_names(legacy_entries)
    ]
    swimmer_map = {s["name"].lower(): s for s in swimmers}

    times: list[Record] = []
    dropped = 0
    for entry in legacy_entries:
        swimmer = swimmer_map.get(_lookup_key(entry.get("name")))
        stroke_id = stroke_map.get(_lookup_key(entry.get("stroke")))

        if not swimmer or not stroke_id:
            dropped += 1
            continue

        times.append({
            "id": generate_id(),
            "swimmerId": swimmer["id"],
            "strokeId": stroke_id,
            "distance": entry.get("distance"),
            "timeSeconds": entry.get("bestSeconds") or 0,
            "resultSeconds": entry.get("resultSeconds"),
            "effort": entry.get("effort"),
            "date": entry.get("timestamp") or datetime.now().isoformat(timespec="seconds"),
            "createdAt": entry.get("id") or now_ms(),
            "legacyId": entry.get("id"),
        })

    return MigrationResult(swimmers=swimmers, times=times, dropped_entries=dropped)


def default_strokes() -> list[Record]:
    """The standard stroke seed with fresh ids."""
    seed = entity_type_for(EntityKind.STROKE).seed
    return [{**item, "id": generate_id()} for item in seed]


class MigrationService:
    """
    Runs the legacy migration at most once per installation.

    Works directly against the store rather than through repositories
    so that read failures abort the migration instead of being read as
    empty collections (which would overwrite existing data).

    The lock makes concurrent calls within one process queue up; the
    second caller sees the marker and returns. Separate processes
    sharing a data directory are not coordinated.
    """

    def __init__(self, store: KeyValueStore, version: str = CURRENT_MIGRATION_VERSION) -> None:
        self._store = store
        self._version = version
        self._lock = asyncio.Lock()

    @property
    def version(self) -> str:
        return self._version

    async def get_migration_version(self) -> Optional[str]:
        """The persisted marker, or None if absent or unreadable."""
        try:
            return await self._store.get(StorageKey.MIGRATION_VERSION.value)
        except StorageError as e:
            logger.error("Failed to read migration version", extra={"error": str(e)})
            return None

    async def is_migrated(self) -> bool:
        return await self.get_migration_version() == self._version

    async def plan(self) -> MigrationResult:
        """
        Compute what a migration would produce without writing anything.

        Uses the default strokes when none are stored yet. Raises
        StorageError if the store can't be read.
        """
        legacy_entries = await load_entities(self._store, StorageKey.LEGACY_ENTRIES)
        strokes = await load_entities(self._store, StorageKey.STROKES)
        return migrate_legacy_entries(legacy_entries, strokes or default_strokes())

    async def run_if_needed(self) -> bool:
        """
        Migrate unless the marker says it's already done.

        Returns True only when entities were migrated. An empty legacy
        log still marks the installation as migrated but returns False.
        Any storage failure is logged and returns False with the marker
        left unset, so the next start tries again.
        """
        async with self._lock:
            try:
                return await self._run()
            except StorageError as e:
                logger.error(
                    "Migration failed, will retry on next start",
                    extra={"version": self._version, "error": str(e)}
                )
                return False

    async def _run(self) -> bool:
        version = await self._store.get(StorageKey.MIGRATION_VERSION.value)
        if version == self._version:
            return False

        legacy_entries = await load_entities(self._store, StorageKey.LEGACY_ENTRIES)
        if not legacy_entries:
            await self._mark_complete()
            logger.info("No legacy entries to migrate")
            return False

        # Strokes must exist before names can resolve against them
        strokes = await load_entities(self._store, StorageKey.STROKES)
        if not strokes:
            strokes = default_strokes()
            await save_entities(self._store, StorageKey.STROKES, strokes)
            logger.info("Seeded default strokes for migration", extra={"count": len(strokes)})

        result = migrate_legacy_entries(legacy_entries, strokes)

        if result.swimmers:
            existing = await load_entities(self._store, StorageKey.SWIMMERS)
            await save_entities(self._store, StorageKey.SWIMMERS, [*result.swimmers, *existing])

        if result.times:
            existing = await load_entities(self._store, StorageKey.TIMES)
            await save_entities(self._store, StorageKey.TIMES, [*result.times, *existing])

        await self._mark_complete()

        logger.info(
            "Migration complete",
            extra={
                "version": self._version,
                "swimmers": len(result.swimmers),
                "times": len(result.times),
                "dropped_entries": result.dropped_entries,
            }
        )
        return True

    async def _mark_complete(self) -> None:
        await self._store.set(StorageKey.MIGRATION_VERSION.value, self._version)
