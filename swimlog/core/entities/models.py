"""
Domain definitions for persisted swim entities.

Records are plain JSON-compatible dicts because that is what lands in the
key-value store, and because updates are field merges. What varies per
entity kind (storage key, validation rule, first-launch seed, field
defaults) is captured once in an EntityType and looked up by EntityKind.

References between entities (Group -> Team, Swimmer -> Team/Group,
Time -> Swimmer/Stroke) are weak: they are ids only, with no cascade and
no integrity check. Consumers resolve a dangling id to "unknown".
"""

import math
import secrets
import string
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping


Record = dict[str, Any]

_ID_ALPHABET = string.digits + string.ascii_lowercase


class StorageKey(Enum):
    """Keys used in the key-value store. Values are the persisted names."""
    TEAMS = "teams"
    GROUPS = "groups"
    STROKES = "strokes"
    SWIMMERS = "swimmers"
    TIMES = "times"
    TRAININGS = "trainings"
    LEGACY_ENTRIES = "swimEntries"
    MIGRATION_VERSION = "migrationVersion"
    UNIT_PREFERENCE = "unitPreference"


class EntityKind(Enum):
    """The closed set of entity kinds the app manages."""
    TEAM = "team"
    GROUP = "group"
    STROKE = "stroke"
    SWIMMER = "swimmer"
    TIME = "time"
    TRAINING = "training"


DEFAULT_STROKE_NAMES = (
    "Freestyle",
    "Backstroke",
    "Breaststroke",
    "Butterfly",
    "Individual Medley",
)


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def generate_id() -> str:
    """
    Generate an opaque entity id: ``<epoch-ms>_<9 random base36 chars>``.

    Uniqueness within a collection is enforced by the repository, not
    by this function.
    """
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{now_ms()}_{suffix}"


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------

def validate_named(record: Any) -> bool:
    """Valid iff ``name`` is a string that is non-empty after trimming."""
    if not isinstance(record, Mapping):
        return False
    name = record.get("name")
    return isinstance(name, str) and name.strip() != ""


def validate_swimmer(record: Any) -> bool:
    return validate_named(record)


def validate_training(record: Any) -> bool:
    return validate_named(record)


def validate_time(record: Any) -> bool:
    """
    Valid iff swimmer and stroke references are present, distance is a
    string, and timeSeconds is a finite number.
    """
    if not isinstance(record, Mapping):
        return False
    if not record.get("swimmerId") or not record.get("strokeId"):
        return False
    if not isinstance(record.get("distance"), str):
        return False
    return is_finite_seconds(record.get("timeSeconds"))


def is_finite_seconds(value: Any) -> bool:
    """True for a finite int or float that isn't a bool."""
    # bool is an int subclass; True is not a time
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


# ---------------------------------------------------------------------------
# Entity Type Metadata
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EntityType:
    """
    Static metadata for one entity kind.

    Frozen because these are definitions, not state. ``defaults`` are
    applied to new records for missing fields; list defaults are copied
    per record.
    """
    kind: EntityKind
    storage_key: StorageKey
    validate: Callable[[Any], bool]
    seed: tuple[Mapping[str, Any], ...] = ()
    defaults: Mapping[str, Any] = field(default_factory=dict)

    def apply_defaults(self, data: Mapping[str, Any]) -> Record:
        record = dict(data)
        for key, value in self.defaults.items():
            if key not in record:
                record[key] = list(value) if isinstance(value, list) else value
        return record


ENTITY_TYPES: dict[EntityKind, EntityType] = {
    EntityKind.TEAM: EntityType(
        kind=EntityKind.TEAM,
        storage_key=StorageKey.TEAMS,
        validate=validate_named,
    ),
    EntityKind.GROUP: EntityType(
        kind=EntityKind.GROUP,
        storage_key=StorageKey.GROUPS,
        validate=validate_named,
    ),
    EntityKind.STROKE: EntityType(
        kind=EntityKind.STROKE,
        storage_key=StorageKey.STROKES,
        validate=validate_named,
        seed=tuple({"name": name} for name in DEFAULT_STROKE_NAMES),
    ),
    EntityKind.SWIMMER: EntityType(
        kind=EntityKind.SWIMMER,
        storage_key=StorageKey.SWIMMERS,
        validate=validate_swimmer,
        defaults={"teamIds": [], "groupIds": []},
    ),
    EntityKind.TIME: EntityType(
        kind=EntityKind.TIME,
        storage_key=StorageKey.TIMES,
        validate=validate_time,
    ),
    EntityKind.TRAINING: EntityType(
        kind=EntityKind.TRAINING,
        storage_key=StorageKey.TRAININGS,
        validate=validate_training,
        defaults={"swimmerIds": [], "groupIds": [], "exercises": []},
    ),
}


def entity_type_for(kind: EntityKind) -> EntityType:
    """Look up the metadata for an entity kind."""
    return ENTITY_TYPES[kind]
