"""
Shared test fixtures and configuration for pytest.
"""

from pathlib import Path

import pytest

from sf_import.config import ImportSettings, PathConfig
from sf_import.importer.database import dispose_engines, init_database
from sf_import.importer.migrations import MigrationRegistry
from sf_import.importer.stager import FileStager
from tests.helpers import RecordingEngine


# ============================================================================
# State database
# ============================================================================


@pytest.fixture(autouse=True)
def _dispose_engines():
    """Drop cached engines so every test gets its own state database."""
    yield
    dispose_engines()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    """SQLite state database under the test's temp directory."""
    url = f"sqlite:///{tmp_path / 'state.db'}"
    init_database(url)
    return url


@pytest.fixture
def registry(db_url: str) -> MigrationRegistry:
    return MigrationRegistry(db_url)


# ============================================================================
# Filesystem layout
# ============================================================================


@pytest.fixture
def paths(tmp_path: Path) -> PathConfig:
    return PathConfig(
        source_dir=str(tmp_path / "json"),
        staging_dir=str(tmp_path / "staging"),
        backup_dir=str(tmp_path / "backup"),
    )


@pytest.fixture
def source_root(paths: PathConfig) -> Path:
    paths.source_path.mkdir(parents=True)
    return paths.source_path


@pytest.fixture
def engine() -> RecordingEngine:
    return RecordingEngine()


@pytest.fixture
def make_stager(paths: PathConfig, engine: RecordingEngine):
    """Factory for stagers sharing the temp layout and the recording engine."""

    def _make(**settings) -> FileStager:
        return FileStager(ImportSettings(**settings), paths, engine, group="sf_import")

    return _make
