"""
CLI context for SF Import.

This module provides the context object that is passed to all CLI commands,
containing configuration and lazily built import components.
"""

from dataclasses import dataclass, field
from pathlib import Path

from sf_import.config import ImporterConfig, load_config_from_yaml
from sf_import.importer.database import init_database
from sf_import.importer.health import MigrationHealthChecker
from sf_import.importer.history import ImportHistory
from sf_import.importer.job import ScheduledImportJob, create_import_job
from sf_import.importer.migrations import MigrationRegistry
from sf_import.importer.orchestrator import ExecutionContext
from sf_import.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ImportContext:
    """
    Context object for CLI commands.

    Holds configuration and the import components shared across commands.
    It is passed via Click's context mechanism. The CLI is a batch context:
    commands that import wire a real transform engine.

    Attributes:
        config_path: Path to configuration file
        log_level: Logging level
        log_file: Optional log file path
    """

    config_path: Path | None = None
    log_level: str | None = None
    log_file: Path | None = None

    # Lazy-loaded attributes
    _config: ImporterConfig | None = field(default=None, init=False, repr=False)
    _job: ScheduledImportJob | None = field(default=None, init=False, repr=False)

    @property
    def config(self) -> ImporterConfig:
        """Get or load configuration."""
        if self._config is None:
            if self.config_path is None:
                raise ValueError(
                    "Configuration file path not provided. "
                    "Use --config option or set SF_IMPORT_CONFIG environment variable."
                )

            logger.debug("Loading configuration", config_path=str(self.config_path))
            self._config = load_config_from_yaml(self.config_path)
            logger.debug("Configuration loaded successfully")

        return self._config

    @property
    def database_url(self) -> str:
        url = self.config.state.database_url
        init_database(url, self.config.state)
        return url

    @property
    def job(self) -> ScheduledImportJob:
        """Get or build the scheduled import job."""
        if self._job is None:
            self._job = create_import_job(self.config, context=ExecutionContext.BATCH)
        return self._job

    @property
    def registry(self) -> MigrationRegistry:
        return MigrationRegistry(self.database_url)

    @property
    def health(self) -> MigrationHealthChecker:
        return MigrationHealthChecker(self.registry)

    @property
    def history(self) -> ImportHistory:
        return ImportHistory(self.database_url)
