"""
Key-value store clients for local persistence.

Everything the app persists is a string stored under a string key:
entity collections are JSON arrays, flags and preferences are plain
strings. This module provides that primitive and nothing more.

Two backends share one protocol:
- FileKeyValueStore: one file per key in a data directory
- MockKeyValueStore: in-memory dict, with failure injection for tests

Neither offers transactions across keys. Callers that write several
keys must order their writes so a crash leaves a recoverable state.
"""

import json
import logging
import os
import re
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Optional, Protocol, Union

from ...core.entities.models import Record, StorageKey

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class StorageError(Exception):
    """Raised when a key-value store read or write fails."""
    pass


class KeyValueStore(Protocol):
    """
    Protocol for asynchronous string storage.

    Using a protocol means tests can provide the in-memory store and
    repositories never know which backend they are talking to.
    """

    async def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...

    async def remove(self, key: str) -> None:
        """Delete key. Removing an absent key is not an error."""
        ...


class FileKeyValueStore:
    """
    File-backed store: ``<data_dir>/<key>.json``.

    Writes go to a temporary file in the same directory and are then
    renamed over the target, so a crash mid-write never leaves a
    truncated value behind.

    Methods are async to match the protocol even though file I/O here is
    synchronous; values are small.
    """

    def __init__(self, data_dir: Union[str, Path]) -> None:
        self._data_dir = Path(data_dir).expanduser()
        self._data_dir.mkdir(parents=True, exist_ok=True)

        logger.info(
            "Initialized file key-value store",
            extra={"data_dir": str(self._data_dir)}
        )

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    async def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(
                "Failed to read key",
                extra={"key": key, "error": str(e)}
            )
            raise StorageError(f"Read failed for {key}: {e}")

    async def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            with NamedTemporaryFile(
                "w",
                dir=self._data_dir,
                delete=False,
                encoding="utf-8",
                suffix=".tmp",
            ) as tmp:
                tmp.write(value)
                temp_path = Path(tmp.name)
            os.replace(temp_path, path)

            logger.debug(
                "Wrote key",
                extra={"key": key, "size_bytes": len(value)}
            )

        except OSError as e:
            logger.error(
                "Failed to write key",
                extra={"key": key, "error": str(e)}
            )
            raise StorageError(f"Write failed for {key}: {e}")

    async def remove(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(
                "Failed to remove key",
                extra={"key": key, "error": str(e)}
            )
            raise StorageError(f"Remove failed for {key}: {e}")


# ---------------------------------------------------------------------------
# Mock Store for Local Development
# ---------------------------------------------------------------------------

class MockKeyValueStore:
    """
    In-memory store for local development and tests.

    ``fail_reads``/``fail_writes`` make every subsequent get or set raise
    StorageError, which is how tests exercise the failure paths.
    ``writes`` records the key of every successful set, in order.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self.fail_reads = False
        self.fail_writes = False
        self.writes: list[str] = []
        logger.info("Initialized mock key-value store (in-memory)")

    async def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise StorageError(f"Read failed for {key}: mock failure")
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError(f"Write failed for {key}: mock failure")
        self._data[key] = value
        self.writes.append(key)

    async def remove(self, key: str) -> None:
        if self.fail_writes:
            raise StorageError(f"Remove failed for {key}: mock failure")
        self._data.pop(key, None)

    # Helpers for test setup and assertions
    def _dump(self, key: str) -> Any:
        """Decode the JSON stored under key (None if absent)."""
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None


# ---------------------------------------------------------------------------
# Collection Helpers
# ---------------------------------------------------------------------------

def _key_name(key: Union[StorageKey, str]) -> str:
    return key.value if isinstance(key, StorageKey) else key


async def load_entities(store: KeyValueStore, key: Union[StorageKey, str]) -> list[Record]:
    """
    Read a JSON array from the store.

    An absent key is an empty collection. Undecodable content, or
    anything but an array of objects, raises StorageError, same as an
    I/O failure.
    """
    name = _key_name(key)
    raw = await store.get(name)
    if not raw:
        return []

    try:
        items = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageError(f"Corrupt collection under {name}: {e}")

    if not isinstance(items, list):
        raise StorageError(f"Collection under {name} is not a list")
    if not all(isinstance(item, dict) for item in items):
        raise StorageError(f"Collection under {name} holds non-object items")
    return items


async def save_entities(
    store: KeyValueStore,
    key: Union[StorageKey, str],
    items: list[Record],
) -> None:
    """Write a collection as a JSON array in one store write."""
    await store.set(_key_name(key), json.dumps(items))


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_key_value_store(
    data_dir: Optional[Union[str, Path]] = None,
    mock_mode: bool = False,
) -> KeyValueStore:
    """
    Create a key-value store based on configuration.

    Args:
        data_dir: Directory for the file store (required if not mock_mode)
        mock_mode: If True, return an in-memory store

    Returns:
        KeyValueStore implementation (file or mock)
    """
    if mock_mode:
        return MockKeyValueStore()

    if data_dir is None:
        raise ValueError("data_dir is required when not in mock mode")

    return FileKeyValueStore(data_dir)
