"""
Shared fixtures for unit tests.

Every test gets a fresh in-memory store; nothing touches the file system
unless a test asks for tmp_path explicitly.
"""

import json

import pytest

from swimlog.infrastructure.kvstore import MockKeyValueStore


@pytest.fixture
def store() -> MockKeyValueStore:
    """Empty in-memory store."""
    return MockKeyValueStore()


@pytest.fixture
def make_store():
    """Build a store pre-loaded with JSON values: make_store(teams=[...])."""
    def _make(**collections) -> MockKeyValueStore:
        return MockKeyValueStore({
            key: value if isinstance(value, str) else json.dumps(value)
            for key, value in collections.items()
        })
    return _make


@pytest.fixture
def legacy_entry():
    """Factory for entries in the flat log format."""
    def _entry(name="Ana", stroke="Freestyle", distance="100", best=60.5, **overrides):
        entry = {
            "id": 1700000000000,
            "timestamp": "t1",
            "name": name,
            "stroke": stroke,
            "distance": distance,
            "effort": "80%",
            "bestTime": "1:00.500",
            "resultTime": "1:12.600",
            "bestSeconds": best,
            "resultSeconds": 72.6,
        }
        entry.update(overrides)
        return entry
    return _entry
