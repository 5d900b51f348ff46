"""
Unit tests for the migration registry.
"""

import pytest

from sf_import.exceptions import StateError
from sf_import.importer.migrations import MigrationStatus


class TestMigrationStatus:
    """Tests for status codes and labels."""

    def test_codes(self):
        assert [int(s) for s in MigrationStatus] == [0, 1, 2, 3, 4]

    def test_labels(self):
        assert MigrationStatus.IDLE.label == "Idle"
        assert MigrationStatus.ROLLING_BACK.label == "Rolling back"


class TestRegistry:
    """Tests for registering and querying migration definitions."""

    def test_register_starts_idle(self, registry):
        handle = registry.register("sf_sessions", "sf_import", label="Sessions")

        assert handle.is_idle
        assert handle.label == "Sessions"
        assert handle.last_imported_at is None

    def test_list_ids_filters_by_group(self, registry):
        registry.register("sf_speakers", "sf_import")
        registry.register("sf_sessions", "sf_import")
        registry.register("other", "unrelated")

        assert registry.list_ids("sf_import") == ["sf_sessions", "sf_speakers"]
        assert registry.list_ids("missing") == []

    def test_create_instances_keeps_order_and_skips_unknown(self, registry):
        registry.register("a", "g")
        registry.register("b", "g")

        instances = registry.create_instances(["b", "unknown", "a"])

        assert list(instances) == ["b", "a"]

    def test_reregister_keeps_status(self, registry):
        registry.register("sf_sessions", "old")
        registry.set_status("sf_sessions", MigrationStatus.DISABLED)

        handle = registry.register("sf_sessions", "sf_import")

        assert handle.migration_group == "sf_import"
        assert handle.get_status() == MigrationStatus.DISABLED

    def test_set_status_unknown_raises(self, registry):
        with pytest.raises(StateError):
            registry.set_status("missing", MigrationStatus.IMPORTING)

    def test_set_group_status(self, registry):
        registry.register("a", "g")
        registry.register("b", "g")
        registry.register("c", "other")

        updated = registry.set_group_status("g", MigrationStatus.IMPORTING)

        assert updated == 2
        assert registry.get("a").get_status() == MigrationStatus.IMPORTING
        assert registry.get("c").is_idle

    def test_mark_imported_stamps_time(self, registry):
        registry.register("a", "g")

        registry.set_group_status("g", MigrationStatus.IDLE, mark_imported=True)

        assert registry.get("a").last_imported_at is not None

    def test_reset_status(self, registry):
        registry.register("a", "g")
        registry.set_status("a", MigrationStatus.STOPPING)

        registry.reset_status("a")

        assert registry.get("a").is_idle
