"""
Import module for SF Import.

This module provides the import lock, migration health check, batch
staging and archival, and the orchestration that ties them together.
"""

# Database utilities
from sf_import.importer.database import (
    dispose_engines,
    get_engine,
    get_session,
    init_database,
    validate_database_connection,
)

# Transform engine adapters
from sf_import.importer.engine import (
    CommandTransformEngine,
    TransformEngine,
    UnavailableTransformEngine,
)
from sf_import.importer.health import MigrationHealthChecker
from sf_import.importer.history import ImportHistory

# Scheduled job
from sf_import.importer.job import ScheduledImportJob, create_import_job
from sf_import.importer.lock import LockManager
from sf_import.importer.migrations import MigrationHandle, MigrationRegistry, MigrationStatus

# Database models
from sf_import.importer.models import Base, ImportLock, ImportRun, MigrationDefinition
from sf_import.importer.orchestrator import ExecutionContext, ImportOrchestrator
from sf_import.importer.results import (
    FailureKind,
    ImportOutcome,
    ImportResult,
    JobReport,
    JobStatus,
)
from sf_import.importer.stager import FileStager

__all__ = [
    # Models
    "Base",
    "ImportLock",
    "ImportRun",
    "MigrationDefinition",
    # Database utilities
    "init_database",
    "get_engine",
    "get_session",
    "dispose_engines",
    "validate_database_connection",
    # Components
    "LockManager",
    "MigrationRegistry",
    "MigrationHandle",
    "MigrationStatus",
    "MigrationHealthChecker",
    "TransformEngine",
    "CommandTransformEngine",
    "UnavailableTransformEngine",
    "FileStager",
    "ImportOrchestrator",
    "ExecutionContext",
    "ImportHistory",
    "ScheduledImportJob",
    "create_import_job",
    # Results
    "ImportResult",
    "ImportOutcome",
    "FailureKind",
    "JobReport",
    "JobStatus",
]
