"""
Unit tests for the registry store and default seeding.
"""

import pytest

from shared.errors import ValidationError
from service_eligibility.app.registry.seed import (
    DEFAULT_DELEGATES, DEFAULT_SCHEDULE, PACKAGES_DOC, RULES_DOC, seed_defaults
)
from service_eligibility.app.registry.store import RegistryStore


class TestRegistryStore:
    """Test cases for RegistryStore."""

    @pytest.fixture
    def store(self):
        return RegistryStore()

    def test_set_and_get(self, store):
        store.set("events", "E1", {"id": "E1", "title": "Arrival"})

        assert store.get("events", "E1") == {"id": "E1", "title": "Arrival"}
        assert store.get("events", "E2") is None

    def test_reads_return_copies(self, store):
        """Test mutating a read document does not change the store."""
        store.set("events", "E1", {"id": "E1", "title": "Arrival"})

        doc = store.get("events", "E1")
        doc["title"] = "Changed"

        assert store.get("events", "E1")["title"] == "Arrival"

    def test_unknown_collection(self, store):
        with pytest.raises(ValidationError):
            store.get_all("tickets")

    def test_snapshot_delivered_on_subscribe_and_change(self, store):
        """Test subscribers receive the current snapshot and then every change."""
        received = []
        store.set("delegates", "D1", {"id": "D1", "name": "A"})

        unsubscribe = store.on_snapshot("delegates", received.append)
        store.set("delegates", "D2", {"id": "D2", "name": "B"})
        unsubscribe()
        store.delete("delegates", "D1")

        assert len(received) == 2
        assert [d["id"] for d in received[0]] == ["D1"]
        assert sorted(d["id"] for d in received[1]) == ["D1", "D2"]

    def test_batch_notifies_once_per_collection(self, store):
        received = []
        store.on_snapshot("events", received.append)

        with store.batch() as batch:
            batch.set("events", "E1", {"id": "E1"})
            batch.set("events", "E2", {"id": "E2"})

        assert len(received) == 2
        assert len(received[-1]) == 2

    def test_batch_discarded_on_error(self, store):
        """Test a failing batch applies none of its writes."""
        with pytest.raises(RuntimeError):
            with store.batch() as batch:
                batch.set("events", "E1", {"id": "E1"})
                raise RuntimeError("boom")

        assert store.get_all("events") == []

    def test_batch_with_unknown_collection_applies_nothing(self, store):
        with pytest.raises(ValidationError):
            with store.batch() as batch:
                batch.set("events", "E1", {"id": "E1"})
                batch.set("tickets", "T1", {"id": "T1"})

        assert store.get_all("events") == []

    def test_failing_handler_does_not_block_others(self, store):
        received = []

        def broken(snapshot):
            if snapshot:
                raise RuntimeError("handler failure")

        store.on_snapshot("events", broken)
        store.on_snapshot("events", received.append)
        store.set("events", "E1", {"id": "E1"})

        assert len(received[-1]) == 1

    def test_store_stats(self, store):
        store.set("events", "E1", {"id": "E1"})
        store.on_snapshot("events", lambda snapshot: None)

        stats = store.get_store_stats()

        assert stats["documents"]["events"] == 1
        assert stats["subscriptions"]["events"] == 1


class TestSeedDefaults:
    """Test cases for seed_defaults."""

    def test_seeds_empty_registry(self):
        store = RegistryStore()

        assert seed_defaults(store) is True
        assert len(store.get_all("events")) == len(DEFAULT_SCHEDULE)
        assert len(store.get_all("delegates")) == len(DEFAULT_DELEGATES)
        assert store.get("config", PACKAGES_DOC)["id"] == PACKAGES_DOC
        assert "Int" in store.get("config", RULES_DOC)["data"]

    def test_skips_populated_registry(self):
        store = RegistryStore()
        store.set("delegates", "X1", {"id": "X1", "name": "Existing"})

        assert seed_defaults(store) is False
        assert store.get_all("events") == []
