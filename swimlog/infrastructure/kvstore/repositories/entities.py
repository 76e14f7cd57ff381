"""
Entity-specific repositories.

Each class binds EntityRepository to one entity kind and adds the
queries its screens need. Queries are pure: they filter the in-memory
collection on every call and never touch the store.
"""

from typing import Any, Mapping, Optional

from ....core.entities.models import (
    EntityKind,
    Record,
    entity_type_for,
    generate_id,
    is_finite_seconds,
)
from ..client import KeyValueStore
from .base import EntityRepository


class TeamRepository(EntityRepository):
    """Teams. Valid iff name is non-empty."""

    def __init__(self, store: KeyValueStore) -> None:
        super().__init__(store, entity_type_for(EntityKind.TEAM))


class GroupRepository(EntityRepository):
    """
    Training groups, optionally linked to a team by ``teamId``.

    The link is weak: deleting a team leaves its groups pointing at an
    id that no longer resolves.
    """

    def __init__(self, store: KeyValueStore) -> None:
        super().__init__(store, entity_type_for(EntityKind.GROUP))

    def get_groups_by_team(self, team_id: str) -> list[Record]:
        return [g for g in self.entities if g.get("teamId") == team_id]


class StrokeRepository(EntityRepository):
    """Strokes. Seeded with the five standard strokes on first launch."""

    def __init__(self, store: KeyValueStore) -> None:
        super().__init__(store, entity_type_for(EntityKind.STROKE))


class SwimmerRepository(EntityRepository):
    """Swimmers with many-to-many weak links to teams and groups."""

    def __init__(self, store: KeyValueStore) -> None:
        super().__init__(store, entity_type_for(EntityKind.SWIMMER))

    def get_swimmers_by_team(self, team_id: str) -> list[Record]:
        return [s for s in self.entities if team_id in (s.get("teamIds") or [])]

    def get_swimmers_by_group(self, group_id: str) -> list[Record]:
        return [s for s in self.entities if group_id in (s.get("groupIds") or [])]

    def get_swimmer_by_name(self, name: str) -> Optional[Record]:
        """
        Case-insensitive exact match on name.

        If several swimmers share a name, the first in collection order
        is returned; which one that is depends on insertion history.
        """
        wanted = name.lower()
        for swimmer in self.entities:
            if str(swimmer.get("name", "")).lower() == wanted:
                return swimmer
        return None


class TimeRepository(EntityRepository):
    """Recorded swim times."""

    def __init__(self, store: KeyValueStore) -> None:
        super().__init__(store, entity_type_for(EntityKind.TIME))

    def get_times_by_swimmer(self, swimmer_id: str) -> list[Record]:
        return [t for t in self.entities if t.get("swimmerId") == swimmer_id]

    def get_times_by_stroke(self, stroke_id: str) -> list[Record]:
        return [t for t in self.entities if t.get("strokeId") == stroke_id]

    def get_best_time(
        self,
        swimmer_id: str,
        stroke_id: str,
        distance: str,
    ) -> Optional[Record]:
        """
        Fastest time for a swimmer/stroke/distance combination.

        Distance is compared as stored ("100" and "100m" are different).
        On an exact tie the earlier record in collection order wins.
        Records whose timeSeconds is not a finite number are skipped.
        """
        best = None
        for time_record in self.entities:
            if (
                time_record.get("swimmerId") != swimmer_id
                or time_record.get("strokeId") != stroke_id
                or time_record.get("distance") != distance
                or not is_finite_seconds(time_record.get("timeSeconds"))
            ):
                continue
            if best is None or time_record["timeSeconds"] < best["timeSeconds"]:
                best = time_record
        return best


class TrainingRepository(EntityRepository):
    """
    Training plans with embedded exercises.

    Exercises belong to their training and are written back through
    ``update``. Only the training itself is validated, so exercise
    contents are stored as given; the one guarantee is that every
    exercise has an id unique within its training.
    """

    def __init__(self, store: KeyValueStore) -> None:
        super().__init__(store, entity_type_for(EntityKind.TRAINING))

    async def add_exercise(
        self,
        training_id: str,
        exercise: Mapping[str, Any],
    ) -> Optional[Record]:
        """Append an exercise. Returns the updated training or None."""
        training = self.get_by_id(training_id)
        if training is None:
            return None

        exercises = training.get("exercises") or []
        taken = {ex.get("id") for ex in exercises}

        new_exercise = dict(exercise)
        if not new_exercise.get("id") or new_exercise["id"] in taken:
            new_exercise["id"] = generate_id()
            while new_exercise["id"] in taken:
                new_exercise["id"] = generate_id()

        return await self.update(training_id, {"exercises": [*exercises, new_exercise]})

    async def update_exercise(
        self,
        training_id: str,
        exercise_id: str,
        patch: Mapping[str, Any],
    ) -> Optional[Record]:
        """Merge patch into one exercise. None if training or exercise is missing."""
        training = self.get_by_id(training_id)
        if training is None:
            return None

        exercises = training.get("exercises") or []
        if not any(ex.get("id") == exercise_id for ex in exercises):
            return None

        exercises = [
            {**ex, **patch, "id": exercise_id} if ex.get("id") == exercise_id else ex
            for ex in exercises
        ]
        return await self.update(training_id, {"exercises": exercises})

    async def remove_exercise(self, training_id: str, exercise_id: str) -> Optional[Record]:
        """Drop one exercise. None if training or exercise is missing."""
        training = self.get_by_id(training_id)
        if training is None:
            return None

        exercises = training.get("exercises") or []
        remaining = [ex for ex in exercises if ex.get("id") != exercise_id]
        if len(remaining) == len(exercises):
            return None

        return await self.update(training_id, {"exercises": remaining})
