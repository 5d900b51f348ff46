"""
Unit tests for the migration health check.
"""

from unittest.mock import MagicMock

import pytest

from sf_import.exceptions import StateError
from sf_import.importer.health import MigrationHealthChecker
from sf_import.importer.migrations import MigrationStatus


class TestCheckGroupStatus:
    """Tests for the idle gate."""

    def test_all_idle(self, registry):
        registry.register("a", "sf_import")
        registry.register("b", "sf_import")

        assert MigrationHealthChecker(registry).check_group_status("sf_import") is True

    def test_empty_group_is_idle(self, registry):
        assert MigrationHealthChecker(registry).check_group_status("sf_import") is True

    @pytest.mark.parametrize(
        "status",
        [
            MigrationStatus.IMPORTING,
            MigrationStatus.ROLLING_BACK,
            MigrationStatus.STOPPING,
            MigrationStatus.DISABLED,
        ],
    )
    def test_any_non_idle_fails(self, registry, status):
        registry.register("a", "sf_import")
        registry.register("b", "sf_import")
        registry.set_status("b", status)

        assert MigrationHealthChecker(registry).check_group_status("sf_import") is False

    def test_other_groups_do_not_matter(self, registry):
        registry.register("a", "sf_import")
        registry.register("busy", "other")
        registry.set_status("busy", MigrationStatus.IMPORTING)

        assert MigrationHealthChecker(registry).check_group_status("sf_import") is True

    def test_stops_at_first_non_idle(self):
        registry = MagicMock()
        first = MagicMock(is_idle=False)
        first.get_status_label.return_value = "Importing"
        second = MagicMock(is_idle=True)
        registry.list_ids.return_value = ["a", "b"]
        registry.create_instances.return_value = {"a": first, "b": second}

        assert MigrationHealthChecker(registry).check_group_status("g") is False
        second.get_status_label.assert_not_called()

    def test_lookup_error_counts_as_unhealthy(self):
        registry = MagicMock()
        registry.list_ids.side_effect = StateError("database is locked")

        assert MigrationHealthChecker(registry).check_group_status("g") is False


class TestGroupStatuses:
    """Tests for listing a group's migrations."""

    def test_returns_handles(self, registry):
        registry.register("a", "g")
        registry.set_status("a", MigrationStatus.DISABLED)

        handles = MigrationHealthChecker(registry).group_statuses("g")

        assert [(h.migration_id, h.get_status_label()) for h in handles] == [("a", "Disabled")]
