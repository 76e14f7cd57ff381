"""
Unit tests for the generic entity repository.

Repositories run against the in-memory store; failure paths use its
fail_reads / fail_writes switches.
"""

import asyncio
import json

import pytest

from swimlog.core.entities.models import DEFAULT_STROKE_NAMES
from swimlog.infrastructure.kvstore.repositories import StrokeRepository, TeamRepository


async def _loaded_teams(store, *names) -> TeamRepository:
    teams = TeamRepository(store)
    await teams.load()
    for name in names:
        await teams.add({"name": name})
    return teams


# ---------------------------------------------------------------------------
# Add
# ---------------------------------------------------------------------------

class TestAdd:

    @pytest.mark.asyncio
    async def test_add_assigns_id_and_created_at(self, store):
        teams = await _loaded_teams(store)

        team = await teams.add({"name": "Sharks"})

        assert team["name"] == "Sharks"
        assert team["id"]
        assert isinstance(team["createdAt"], int)

    @pytest.mark.asyncio
    async def test_add_ignores_supplied_id(self, store):
        teams = await _loaded_teams(store)

        team = await teams.add({"id": "mine", "name": "Sharks"})

        assert team["id"] != "mine"

    @pytest.mark.asyncio
    async def test_newest_first_and_persisted(self, store):
        teams = await _loaded_teams(store, "Sharks", "Dolphins")

        assert [t["name"] for t in teams.entities] == ["Dolphins", "Sharks"]
        assert [t["name"] for t in store._dump("teams")] == ["Dolphins", "Sharks"]

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, store):
        teams = await _loaded_teams(store)

        for i in range(50):
            await teams.add({"name": f"Team {i}"})

        ids = [t["id"] for t in teams.entities]
        assert len(set(ids)) == 50

    @pytest.mark.asyncio
    async def test_invalid_data_changes_nothing(self, store):
        teams = await _loaded_teams(store, "Sharks")
        before_memory = teams.entities
        before_stored = store._dump("teams")
        writes_before = len(store.writes)

        assert await teams.add({"name": "   "}) is None

        assert teams.entities == before_memory
        assert store._dump("teams") == before_stored
        assert len(store.writes) == writes_before

    @pytest.mark.asyncio
    async def test_failed_write_returns_none_and_keeps_memory(self, store):
        teams = await _loaded_teams(store, "Sharks")
        store.fail_writes = True

        assert await teams.add({"name": "Dolphins"}) is None
        assert [t["name"] for t in teams.entities] == ["Sharks"]

    @pytest.mark.asyncio
    async def test_concurrent_adds_are_not_lost(self, store):
        teams = await _loaded_teams(store)

        await asyncio.gather(*(teams.add({"name": f"Team {i}"}) for i in range(10)))

        assert teams.count == 10
        assert len(store._dump("teams")) == 10


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------

class TestUpdate:

    @pytest.mark.asyncio
    async def test_merge_replaces_only_patched_field(self, store):
        teams = await _loaded_teams(store)
        team = await teams.add({"name": "Sharks", "city": "Lisbon"})

        updated = await teams.update(team["id"], {"name": "Tiger Sharks"})

        expected = {**team, "name": "Tiger Sharks"}
        assert {k: v for k, v in updated.items() if k != "updatedAt"} == expected
        assert isinstance(updated["updatedAt"], int)
        assert teams.get_by_id(team["id"]) == updated
        assert store._dump("teams")[0] == updated

    @pytest.mark.asyncio
    async def test_update_keeps_position(self, store):
        teams = await _loaded_teams(store, "A", "B", "C")
        middle = teams.entities[1]

        await teams.update(middle["id"], {"name": "B2"})

        assert [t["name"] for t in teams.entities] == ["C", "B2", "A"]

    @pytest.mark.asyncio
    async def test_invalid_merge_is_discarded(self, store):
        teams = await _loaded_teams(store, "Sharks")
        team = teams.entities[0]
        before_stored = store._dump("teams")

        assert await teams.update(team["id"], {"name": ""}) is None

        assert teams.get_by_id(team["id"]) == team
        assert store._dump("teams") == before_stored

    @pytest.mark.asyncio
    async def test_unknown_id_returns_none(self, store):
        teams = await _loaded_teams(store, "Sharks")
        assert await teams.update("nope", {"name": "X"}) is None

    @pytest.mark.asyncio
    async def test_id_cannot_be_patched(self, store):
        teams = await _loaded_teams(store, "Sharks")
        team = teams.entities[0]

        updated = await teams.update(team["id"], {"id": "other", "name": "X"})

        assert updated["id"] == team["id"]


# ---------------------------------------------------------------------------
# Remove, Lookup, Clear
# ---------------------------------------------------------------------------

class TestRemoveAndLookup:

    @pytest.mark.asyncio
    async def test_remove_existing(self, store):
        teams = await _loaded_teams(store, "Sharks", "Dolphins")
        sharks = teams.entities[1]

        assert await teams.remove(sharks["id"]) is True

        assert [t["name"] for t in teams.entities] == ["Dolphins"]
        assert [t["name"] for t in store._dump("teams")] == ["Dolphins"]

    @pytest.mark.asyncio
    async def test_remove_unknown_id_is_a_no_op(self, store):
        teams = await _loaded_teams(store, "Sharks", "Dolphins")
        before = teams.entities
        writes_before = len(store.writes)

        assert await teams.remove("nope") is False

        assert teams.entities == before
        assert len(store.writes) == writes_before

    @pytest.mark.asyncio
    async def test_get_by_id_returns_a_copy(self, store):
        teams = await _loaded_teams(store, "Sharks")
        team_id = teams.entities[0]["id"]

        team = teams.get_by_id(team_id)
        team["name"] = "Changed"

        assert teams.get_by_id(team_id)["name"] == "Sharks"
        assert teams.get_by_id("nope") is None

    @pytest.mark.asyncio
    async def test_clear(self, store):
        teams = await _loaded_teams(store, "Sharks")

        assert await teams.clear() is True

        assert teams.entities == []
        assert store._dump("teams") == []


# ---------------------------------------------------------------------------
# Bulk Insert
# ---------------------------------------------------------------------------

class TestBulkInsert:

    @pytest.mark.asyncio
    async def test_single_write_prepends_batch(self, store):
        teams = await _loaded_teams(store, "Existing")
        writes_before = len(store.writes)

        inserted = await teams.bulk_insert([{"name": "A"}, {"name": "B"}, {"name": "C"}])

        assert len(store.writes) == writes_before + 1
        assert [t["name"] for t in teams.entities] == ["A", "B", "C", "Existing"]
        assert all(t["id"] and t["createdAt"] for t in inserted)

    @pytest.mark.asyncio
    async def test_keeps_supplied_ids_and_timestamps(self, store):
        teams = await _loaded_teams(store)

        inserted = await teams.bulk_insert([{"id": "t1", "name": "A", "createdAt": 5}])

        assert inserted == [{"id": "t1", "name": "A", "createdAt": 5}]

    @pytest.mark.asyncio
    async def test_duplicate_ids_are_replaced(self, store):
        teams = await _loaded_teams(store)
        await teams.bulk_insert([{"id": "t1", "name": "A"}])

        inserted = await teams.bulk_insert([{"id": "t1", "name": "B"}, {"id": "t2", "name": "C"}, {"id": "t2", "name": "D"}])

        ids = [t["id"] for t in teams.entities]
        assert len(set(ids)) == len(ids) == 4
        assert inserted[1]["id"] == "t2"

    @pytest.mark.asyncio
    async def test_failed_write_returns_empty(self, store):
        teams = await _loaded_teams(store)
        store.fail_writes = True

        assert await teams.bulk_insert([{"name": "A"}]) == []
        assert teams.count == 0


# ---------------------------------------------------------------------------
# Load, Seeding, Reload
# ---------------------------------------------------------------------------

class TestLoad:

    @pytest.mark.asyncio
    async def test_seeds_empty_collection_once(self, store):
        strokes = StrokeRepository(store)

        first = await strokes.load()
        second = await strokes.load()

        assert [s["name"] for s in first] == list(DEFAULT_STROKE_NAMES)
        assert second == first
        assert store._dump("strokes") == first
        assert store.writes.count("strokes") == 1

    @pytest.mark.asyncio
    async def test_does_not_seed_existing_collection(self, make_store):
        store = make_store(strokes=[{"id": "k1", "name": "Sidestroke"}])
        strokes = StrokeRepository(store)

        assert await strokes.load() == [{"id": "k1", "name": "Sidestroke"}]

    @pytest.mark.asyncio
    async def test_loading_flags(self, store):
        teams = TeamRepository(store)
        assert teams.is_loading
        assert not teams.is_initialized

        await teams.load()

        assert not teams.is_loading
        assert teams.is_initialized

    @pytest.mark.asyncio
    async def test_read_failure_loads_empty(self, store):
        store.fail_reads = True
        teams = TeamRepository(store)

        assert await teams.load() == []
        assert not teams.is_loading

    @pytest.mark.asyncio
    async def test_corrupt_collection_loads_empty(self, make_store):
        store = make_store(teams="{not json")
        teams = TeamRepository(store)

        assert await teams.load() == []

    @pytest.mark.asyncio
    async def test_non_object_items_load_empty_and_add_still_works(self, make_store):
        store = make_store(teams=["junk"])
        teams = TeamRepository(store)

        assert await teams.load() == []
        team = await teams.add({"name": "Sharks"})

        assert team is not None
        assert store._dump("teams") == [team]

    @pytest.mark.asyncio
    async def test_reload_picks_up_external_changes(self, store):
        teams = await _loaded_teams(store, "Sharks")
        await store.set("teams", json.dumps([{"id": "x", "name": "Outside"}]))

        await teams.reload()

        assert teams.entities == [{"id": "x", "name": "Outside"}]
