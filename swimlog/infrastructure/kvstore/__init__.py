"""
Local key-value persistence for swim entities.

Supports a file-backed store and an in-memory mock for development and
tests. Repositories, migration, and the data context build on it.
"""

from .client import (
    FileKeyValueStore,
    KeyValueStore,
    MockKeyValueStore,
    StorageError,
    create_key_value_store,
    load_entities,
    save_entities,
)
from .context import DataContext
from .migration import CURRENT_MIGRATION_VERSION, MigrationResult, MigrationService

__all__ = [
    "CURRENT_MIGRATION_VERSION",
    "DataContext",
    "FileKeyValueStore",
    "KeyValueStore",
    "MigrationResult",
    "MigrationService",
    "MockKeyValueStore",
    "StorageError",
    "create_key_value_store",
    "load_entities",
    "save_entities",
]
