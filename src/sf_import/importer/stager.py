"""
Batch directory staging, import and archival.

Each fetch cycle leaves one directory of JSON files under the source root.
The stager copies those files into the flat staging directory, triggers the
transform engine, then archives or deletes the batch directory.
"""

import os
import shutil
from pathlib import Path

from sf_import.config import MIGRATE_GROUP, ImportSettings, PathConfig
from sf_import.exceptions import (
    ArchivalIOError,
    ImportStepError,
    StagingIOError,
    TransformEngineError,
)
from sf_import.importer.engine import TransformEngine
from sf_import.importer.results import FailureKind, ImportOutcome, ImportResult
from sf_import.utils.logging import get_logger

logger = get_logger(__name__)

JSON_SUFFIX = ".json"


def _failure_kind(error: ImportStepError) -> FailureKind:
    if isinstance(error, TransformEngineError):
        return FailureKind.TRANSFORM_ENGINE
    if isinstance(error, ArchivalIOError):
        return FailureKind.ARCHIVAL_IO
    return FailureKind.STAGING_IO


class FileStager:
    """
    Moves one batch directory through scan, stage, import and archive.

    Staging is flat and overwrites on name clashes: the last batch to supply
    ``sessions.json`` wins, so two batches must not be staged together if
    they share file names. Staged copies are left in place after the import;
    the next batch overwrites them.

    Backups are kept in the backup root, one directory per imported batch.
    At most ``settings.backup_limit`` are retained. Age is the backup
    directory's modification time, stamped when the batch is archived, with
    the directory name breaking ties.
    """

    def __init__(
        self,
        settings: ImportSettings,
        paths: PathConfig,
        engine: TransformEngine,
        group: str = MIGRATE_GROUP,
    ):
        self.settings = settings
        self.source_root = paths.source_path
        self.staging_dir = paths.staging_path
        self.backup_root = paths.backup_path
        self.engine = engine
        self.group = group

    def list_batch_directories(self) -> list[Path]:
        """
        List batch directories waiting under the source root.

        Returns:
            Immediate subdirectories, sorted by name; files are excluded
        """
        if not self.source_root.is_dir():
            logger.debug("Source root does not exist", source_root=str(self.source_root))
            return []

        return sorted(
            (entry for entry in self.source_root.iterdir() if entry.is_dir()),
            key=lambda p: p.name,
        )

    def scan_json_files(self, batch_dir: Path) -> list[Path]:
        """Recursively find ``*.json`` files in a batch directory."""
        try:
            return sorted(
                path
                for path in batch_dir.rglob(f"*{JSON_SUFFIX}")
                if path.is_file() and path.name.endswith(JSON_SUFFIX)
            )
        except OSError as e:
            raise StagingIOError(f"Failed to scan {batch_dir}: {e}") from e

    def stage_and_import(self, batch_dir: str | Path) -> ImportResult:
        """
        Stage a batch directory's JSON files, import them and archive the batch.

        Errors are logged and returned as a failed result. The batch directory
        is left as it was when the error happened; nothing is rolled back.

        Args:
            batch_dir: Batch directory under the source root

        Returns:
            Outcome of the import
        """
        batch_dir = Path(batch_dir)
        staged = 0

        try:
            json_files = self.scan_json_files(batch_dir)
            if not json_files:
                logger.info("No JSON files in batch directory", batch_dir=str(batch_dir))
                return ImportResult(batch_dir=batch_dir, outcome=ImportOutcome.NO_FILES)

            staged = self.stage_files(json_files)
            self.run_engine()
            archived_to = self.archive(batch_dir)

        except ImportStepError as e:
            kind = _failure_kind(e)
            logger.error(
                str(e),
                batch_dir=str(batch_dir),
                failure_kind=kind.value,
                files_staged=staged,
            )
            return ImportResult.failed(batch_dir, kind, e, files_staged=staged)

        logger.info(
            "Batch imported",
            batch_dir=str(batch_dir),
            files_staged=staged,
            archived_to=str(archived_to) if archived_to else None,
        )
        return ImportResult(
            batch_dir=batch_dir,
            outcome=ImportOutcome.IMPORTED,
            files_staged=staged,
            archived_to=archived_to,
        )

    def stage_files(self, json_files: list[Path]) -> int:
        """
        Copy JSON files into the flat staging directory, replacing existing ones.

        Returns:
            Number of files copied

        Raises:
            StagingIOError: If a copy fails
        """
        try:
            self.staging_dir.mkdir(parents=True, exist_ok=True)
            for source in json_files:
                shutil.copy2(source, self.staging_dir / source.name)
                logger.debug("Staged JSON file", source=str(source))
        except OSError as e:
            raise StagingIOError(f"Failed to stage JSON files: {e}") from e

        return len(json_files)

    def run_engine(self) -> None:
        """
        Trigger the transform engine for the import group.

        Raises:
            TransformEngineError: If the engine fails in any way
        """
        try:
            self.engine.import_group(self.group)
        except TransformEngineError:
            raise
        except Exception as e:
            raise TransformEngineError(str(e), group_id=self.group) from e

    def archive(self, batch_dir: Path) -> Path | None:
        """
        Back up or delete an imported batch directory.

        Returns:
            Backup location, or None when backups are disabled

        Raises:
            ArchivalIOError: If the move or delete fails. A failed prune is
                logged; the batch has already left the source root by then.
        """
        try:
            if not self.settings.backup_json:
                shutil.rmtree(batch_dir)
                logger.debug("Deleted imported batch directory", batch_dir=str(batch_dir))
                return None

            self.backup_root.mkdir(parents=True, exist_ok=True)
            target = self._unique_backup_path(batch_dir.name)
            shutil.move(str(batch_dir), str(target))
            os.utime(target)
            logger.debug("Archived batch directory", batch_dir=str(batch_dir), target=str(target))
        except OSError as e:
            raise ArchivalIOError(f"Failed to archive {batch_dir}: {e}") from e

        try:
            self.prune_backups()
        except OSError as e:
            logger.warning(
                "Failed to prune backups", backup_root=str(self.backup_root), error=str(e)
            )
        return target

    def list_backups(self) -> list[Path]:
        """Backup directories, oldest first."""
        if not self.backup_root.is_dir():
            return []

        return sorted(
            (entry for entry in self.backup_root.iterdir() if entry.is_dir()),
            key=lambda p: (p.stat().st_mtime_ns, p.name),
        )

    def prune_backups(self) -> list[Path]:
        """
        Delete the oldest backups beyond ``backup_limit``.

        Returns:
            Removed backup directories
        """
        backups = self.list_backups()
        excess = len(backups) - self.settings.backup_limit
        if excess <= 0:
            return []

        removed = backups[:excess]
        for backup in removed:
            shutil.rmtree(backup)
            logger.info("Pruned backup", backup=str(backup))

        return removed

    def _unique_backup_path(self, name: str) -> Path:
        target = self.backup_root / name
        counter = 0
        while target.exists():
            target = self.backup_root / f"{name}_{counter}"
            counter += 1
        return target
