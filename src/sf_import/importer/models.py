"""
SQLAlchemy models for import state.

This module defines the database schema for the import lock, the registry of
migration definitions and their statuses, and the per-batch import history.
"""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class ImportLock(Base):
    """
    A named, expiring lock row.

    Presence of an unexpired row for a name means the lock is held. The
    primary key on ``name`` makes acquisition a single atomic insert, so the
    lock serializes runs across processes sharing the database.
    """

    __tablename__ = "import_locks"

    name: Mapped[str] = mapped_column(String(255), primary_key=True, comment="Lock name")
    lock_id: Mapped[str] = mapped_column(
        String(64), nullable=False, comment="Token of the lock holder"
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True, comment="When the lock may be reclaimed"
    )
    acquired_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), comment="When lock was taken"
    )

    def __repr__(self) -> str:
        return (
            f"<ImportLock(name='{self.name}', lock_id='{self.lock_id}', "
            f"expires_at={self.expires_at})>"
        )


class MigrationDefinition(Base):
    """
    A migration definition known to the transform engine.

    Each row is one migration (sessions, classes, programs, ...) tagged with
    a migration group. The transform engine moves its status away from idle
    while it runs; the health check refuses to import unless every
    definition in the group is idle.
    """

    __tablename__ = "migration_definitions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    migration_id: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True, comment="Migration identifier"
    )
    migration_group: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True, comment="Group the migration belongs to"
    )
    label: Mapped[str | None] = mapped_column(
        String(512), nullable=True, comment="Human-readable migration name"
    )
    status: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="0 idle, 1 importing, 2 rolling back, 3 stopping, 4 disabled",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), comment="When record was created"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        comment="When record was last updated",
    )
    last_imported_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, comment="When the migration last finished an import"
    )

    __table_args__ = (
        CheckConstraint("status BETWEEN 0 AND 4", name="ck_migration_definitions_status"),
        Index("idx_migration_group_status", "migration_group", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<MigrationDefinition(migration_id='{self.migration_id}', "
            f"group='{self.migration_group}', status={self.status})>"
        )


class ImportRun(Base):
    """
    Outcome of one batch directory passing through the import pipeline.
    """

    __tablename__ = "import_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    batch_name: Mapped[str] = mapped_column(
        String(512), nullable=False, index=True, comment="Name of the batch directory"
    )
    outcome: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
        comment="Outcome: imported, no_files, skipped, failed",
    )
    failure_kind: Mapped[str | None] = mapped_column(
        String(30), nullable=True, comment="staging_io, transform_engine or archival_io"
    )
    error_message: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="Error message if the import failed"
    )
    files_staged: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, comment="Number of JSON files copied to staging"
    )
    archived_to: Mapped[str | None] = mapped_column(
        String(1024), nullable=True, comment="Backup location of the batch, if archived"
    )

    started_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), index=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "outcome IN ('imported', 'no_files', 'skipped', 'failed')",
            name="ck_import_runs_outcome",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<ImportRun(id={self.id}, batch_name='{self.batch_name}', "
            f"outcome='{self.outcome}')>"
        )
