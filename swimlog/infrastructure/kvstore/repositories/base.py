"""
Generic repository for one persisted entity collection.

The repository owns a single storage key. It keeps the collection in
memory (newest first), validates writes with the entity type's rule,
assigns ids and timestamps, and writes the whole collection back on
every mutation.

Failure policy: nothing raised by the store escapes. Read failures load
as an empty collection; write failures are logged and reported through
the return value (None / False / empty list), and the in-memory
collection is left as it was before the call.

Mutations on one repository are serialized with an asyncio.Lock, so two
concurrent adds both land instead of one overwriting the other.
"""

import asyncio
import copy
import logging
from typing import Any, Iterable, Mapping, Optional

from ....core.entities.models import EntityType, Record, generate_id, now_ms
from ..client import KeyValueStore, StorageError, load_entities, save_entities

logger = logging.getLogger(__name__)


class EntityRepository:
    """
    Repository for one entity collection.

    Each method corresponds to an operation the screens need:
    - load / reload: Read the collection, seeding defaults on first launch
    - add / update / remove / clear: Validated mutations, persisted whole
    - bulk_insert: Batch prepend with a single store write
    - get_by_id: In-memory lookup, no I/O
    """

    def __init__(self, store: KeyValueStore, entity_type: EntityType) -> None:
        self._store = store
        self._type = entity_type
        self._entities: list[Record] = []
        self._is_loading = True
        self._is_initialized = False
        self._lock = asyncio.Lock()

    # -----------------------------------------------------------------------
    # State
    # -----------------------------------------------------------------------

    @property
    def entity_type(self) -> EntityType:
        return self._type

    @property
    def storage_key(self) -> str:
        return self._type.storage_key.value

    @property
    def entities(self) -> list[Record]:
        """Snapshot of the collection, newest first."""
        return copy.deepcopy(self._entities)

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    @property
    def count(self) -> int:
        return len(self._entities)

    # -----------------------------------------------------------------------
    # Operations
    # -----------------------------------------------------------------------

    async def load(self) -> list[Record]:
        """
        Load the collection from the store.

        If the stored collection is empty and the entity type has seed
        data, the seed is written (ids assigned where missing) and
        returned. A failed read yields an empty collection.
        """
        async with self._lock:
            try:
                saved = await load_entities(self._store, self._type.storage_key)
            except StorageError as e:
                logger.error(
                    "Failed to load collection",
                    extra={"storage_key": self.storage_key, "error": str(e)}
                )
                self._entities = []
                self._is_loading = False
                return []

            if not saved and self._type.seed:
                saved = self._build_seed()
                # The seed is used in memory even if this write fails;
                # the next load simply seeds again.
                if await self._persist(saved):
                    logger.info(
                        "Seeded collection",
                        extra={"storage_key": self.storage_key, "count": len(saved)}
                    )

            self._entities = saved
            self._is_initialized = True
            self._is_loading = False

            logger.debug(
                "Loaded collection",
                extra={"storage_key": self.storage_key, "count": len(saved)}
            )
            return copy.deepcopy(saved)

    async def reload(self) -> list[Record]:
        """Re-read the collection, replacing in-memory state."""
        self._is_loading = True
        return await self.load()

    async def add(self, data: Mapping[str, Any]) -> Optional[Record]:
        """
        Create a record from form data.

        Returns the created record (with generated id and createdAt), or
        None if validation rejected the data or the write failed.
        """
        if not self._type.validate(data):
            logger.debug(
                "Rejected invalid record",
                extra={"storage_key": self.storage_key}
            )
            return None

        async with self._lock:
            record = self._type.apply_defaults(data)
            record["id"] = self._fresh_id()
            record["createdAt"] = now_ms()

            updated = [record, *self._entities]
            if not await self._persist(updated):
                return None

            self._entities = updated
            return copy.deepcopy(record)

    async def update(self, entity_id: str, patch: Mapping[str, Any]) -> Optional[Record]:
        """
        Merge patch onto an existing record.

        The merged record is validated as a whole; if it fails, nothing
        changes and None is returned. The record's id cannot be patched.
        """
        async with self._lock:
            index = self._index_of(entity_id)
            if index is None:
                logger.debug(
                    "Update target not found",
                    extra={"storage_key": self.storage_key, "entity_id": entity_id}
                )
                return None

            existing = self._entities[index]
            merged = {**existing, **patch, "id": existing["id"], "updatedAt": now_ms()}
            if not self._type.validate(merged):
                logger.debug(
                    "Rejected invalid update",
                    extra={"storage_key": self.storage_key, "entity_id": entity_id}
                )
                return None

            updated = list(self._entities)
            updated[index] = merged
            if not await self._persist(updated):
                return None

            self._entities = updated
            return copy.deepcopy(merged)

    async def remove(self, entity_id: str) -> bool:
        """Remove a record. False if no record matched or the write failed."""
        async with self._lock:
            filtered = [e for e in self._entities if e.get("id") != entity_id]
            if len(filtered) == len(self._entities):
                return False

            if not await self._persist(filtered):
                return False

            self._entities = filtered
            return True

    def get_by_id(self, entity_id: str) -> Optional[Record]:
        for entity in self._entities:
            if entity.get("id") == entity_id:
                return copy.deepcopy(entity)
        return None

    async def clear(self) -> bool:
        """Replace the collection with an empty one."""
        async with self._lock:
            if not await self._persist([]):
                return False
            self._entities = []
            return True

    async def bulk_insert(self, items: Iterable[Mapping[str, Any]]) -> list[Record]:
        """
        Prepend a batch of records with one store write.

        Items keep their own id and createdAt when present; missing ones
        are assigned. An id that already exists in the collection (or
        earlier in the batch) is replaced with a fresh one. Returns the
        inserted batch, or an empty list if the write failed.
        """
        async with self._lock:
            taken = {e.get("id") for e in self._entities}
            batch: list[Record] = []

            for item in items:
                record = dict(item)
                if not record.get("id") or record["id"] in taken:
                    if record.get("id"):
                        logger.warning(
                            "Replacing duplicate id in bulk insert",
                            extra={"storage_key": self.storage_key, "entity_id": record["id"]}
                        )
                    record["id"] = self._fresh_id(taken)
                if not record.get("createdAt"):
                    record["createdAt"] = now_ms()
                taken.add(record["id"])
                batch.append(record)

            updated = [*batch, *self._entities]
            if not await self._persist(updated):
                return []

            self._entities = updated
            logger.info(
                "Bulk inserted records",
                extra={"storage_key": self.storage_key, "count": len(batch)}
            )
            return copy.deepcopy(batch)

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    async def _persist(self, items: list[Record]) -> bool:
        try:
            await save_entities(self._store, self._type.storage_key, items)
            return True
        except StorageError as e:
            logger.error(
                "Failed to save collection",
                extra={"storage_key": self.storage_key, "error": str(e)}
            )
            return False

    def _index_of(self, entity_id: str) -> Optional[int]:
        for index, entity in enumerate(self._entities):
            if entity.get("id") == entity_id:
                return index
        return None

    def _fresh_id(self, taken: Optional[set] = None) -> str:
        if taken is None:
            taken = {e.get("id") for e in self._entities}
        new_id = generate_id()
        while new_id in taken:
            new_id = generate_id()
        return new_id

    def _build_seed(self) -> list[Record]:
        seeded: list[Record] = []
        taken: set = set()
        for item in self._type.seed:
            record = dict(item)
            if not record.get("id"):
                record["id"] = self._fresh_id(taken)
            taken.add(record["id"])
            seeded.append(record)
        return seeded
