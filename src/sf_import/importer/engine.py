"""
Transform engine adapters.

The transform engine maps the staged JSON files into destination records.
It is an external program; the import pipeline only needs to trigger it for
a migration group and learn whether it succeeded.
"""

import subprocess
from collections.abc import Sequence
from typing import Protocol

from sf_import.exceptions import TransformEngineError
from sf_import.importer.migrations import MigrationRegistry, MigrationStatus
from sf_import.utils.logging import get_logger

logger = get_logger(__name__)


class TransformEngine(Protocol):
    """Imports every migration of a group from the staged files."""

    def import_group(self, group_id: str) -> None:
        """Run the import synchronously; raise on failure."""
        ...


class CommandTransformEngine:
    """
    Runs an external import command for a migration group.

    Each argument of ``command`` may contain a ``{group}`` placeholder. While
    the command runs, the group's migrations are marked importing in the
    registry, so a concurrent health check sees them as busy. They return to
    idle when the command exits. If this process dies mid-run they stay
    importing until an operator resets them.

    Usage:
        engine = CommandTransformEngine(
            ["drush", "migrate:import", "--group={group}"],
            registry=registry,
        )
        engine.import_group("sf_import")
    """

    def __init__(
        self,
        command: Sequence[str],
        registry: MigrationRegistry | None = None,
        timeout: int | None = None,
        cwd: str | None = None,
    ):
        if not command:
            raise ValueError("Transform engine command cannot be empty")
        self.command = list(command)
        self.registry = registry
        self.timeout = timeout
        self.cwd = cwd

    def build_command(self, group_id: str) -> list[str]:
        return [arg.replace("{group}", group_id) for arg in self.command]

    def import_group(self, group_id: str) -> None:
        """
        Run the import command for ``group_id``.

        Raises:
            TransformEngineError: If the command cannot start, times out or
                exits non-zero
        """
        args = self.build_command(group_id)
        logger.info("Starting transform engine", group=group_id, command=args)

        if self.registry is not None:
            self.registry.set_group_status(group_id, MigrationStatus.IMPORTING)

        succeeded = False
        try:
            completed = subprocess.run(
                args,
                cwd=self.cwd,
                timeout=self.timeout,
                capture_output=True,
                text=True,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise TransformEngineError(
                f"Transform engine timed out after {self.timeout}s", group_id=group_id
            ) from e
        except OSError as e:
            raise TransformEngineError(
                f"Transform engine could not be started: {e}", group_id=group_id
            ) from e
        else:
            if completed.returncode != 0:
                stderr = (completed.stderr or "").strip()
                raise TransformEngineError(
                    f"Transform engine failed: {stderr}" if stderr else "Transform engine failed",
                    group_id=group_id,
                    returncode=completed.returncode,
                )
            succeeded = True
        finally:
            if self.registry is not None:
                self.registry.set_group_status(
                    group_id, MigrationStatus.IDLE, mark_imported=succeeded
                )

        logger.info("Transform engine finished", group=group_id)


class UnavailableTransformEngine:
    """Engine stand-in for contexts where imports must not run."""

    def __init__(self, reason: str = "Transform engine is only available in batch context"):
        self.reason = reason

    def import_group(self, group_id: str) -> None:
        raise TransformEngineError(self.reason, group_id=group_id)
