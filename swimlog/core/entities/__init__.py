"""
Entity definitions for the normalized data model.

Each entity kind carries its storage key, validator, and seed data as
static metadata, so repositories never branch on type names.
"""

from .models import (
    DEFAULT_STROKE_NAMES,
    ENTITY_TYPES,
    EntityKind,
    EntityType,
    Record,
    StorageKey,
    entity_type_for,
    generate_id,
    is_finite_seconds,
    now_ms,
    validate_named,
    validate_swimmer,
    validate_time,
    validate_training,
)

__all__ = [
    "DEFAULT_STROKE_NAMES",
    "ENTITY_TYPES",
    "EntityKind",
    "EntityType",
    "Record",
    "StorageKey",
    "entity_type_for",
    "generate_id",
    "is_finite_seconds",
    "now_ms",
    "validate_named",
    "validate_swimmer",
    "validate_time",
    "validate_training",
]
