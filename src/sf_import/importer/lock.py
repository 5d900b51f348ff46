"""
Named import lock backed by the state database.

The lock guarantees that at most one import run is active at a time, across
scheduler ticks and across hosts that share the state database.
"""

import uuid
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from sf_import.config import LOCK_NAME
from sf_import.importer.database import get_session
from sf_import.importer.models import ImportLock
from sf_import.utils.logging import get_logger

logger = get_logger(__name__)

# Maximum hold time of the import lock in seconds
DEFAULT_LOCK_TIMEOUT = 1200


def _utcnow() -> datetime:
    # Naive UTC, matching the DateTime columns
    return datetime.now(UTC).replace(tzinfo=None)


class LockManager:
    """
    Acquires and releases the named import lock.

    The lock is exclusive and not reentrant: a second ``acquire()`` without an
    intervening ``release()`` returns False, even from the same manager. The
    hold time is bounded by ``timeout``; once it passes, another run may
    reclaim the lock. A run that legitimately takes longer than the timeout
    can therefore overlap with the next one.

    Usage:
        lock = LockManager(database_url)
        with lock.held() as acquired:
            if acquired:
                ...  # import
    """

    def __init__(
        self,
        database_url: str,
        name: str = LOCK_NAME,
        timeout: int = DEFAULT_LOCK_TIMEOUT,
    ):
        """
        Initialize lock manager.

        Args:
            database_url: State database URL
            name: Lock name
            timeout: Maximum hold time in seconds
        """
        self.database_url = database_url
        self.name = name
        self.timeout = timeout
        self.lock_id = uuid.uuid4().hex

    def acquire(self) -> bool:
        """
        Try to take the lock without blocking.

        Returns:
            True if the lock was taken, False if it is held elsewhere
        """
        now = _utcnow()

        with get_session(self.database_url) as session:
            reclaimed = session.execute(
                delete(ImportLock).where(ImportLock.name == self.name, ImportLock.expires_at <= now)
            ).rowcount
        if reclaimed:
            logger.warning("Reclaimed expired import lock", lock_name=self.name)

        with get_session(self.database_url) as session:
            session.add(
                ImportLock(
                    name=self.name,
                    lock_id=self.lock_id,
                    expires_at=now + timedelta(seconds=self.timeout),
                    acquired_at=now,
                )
            )
            try:
                session.flush()
            except IntegrityError:
                session.rollback()
                logger.info("Import lock is held by another run", lock_name=self.name)
                return False

        logger.debug("Import lock acquired", lock_name=self.name, timeout=self.timeout)
        return True

    def release(self) -> None:
        """Release the lock if this manager holds it. Safe to call when unheld."""
        with get_session(self.database_url) as session:
            released = session.execute(
                delete(ImportLock).where(
                    ImportLock.name == self.name, ImportLock.lock_id == self.lock_id
                )
            ).rowcount
        if released:
            logger.debug("Import lock released", lock_name=self.name)

    def force_release(self) -> bool:
        """
        Delete the lock regardless of which run holds it.

        Returns:
            True if a lock row was removed
        """
        with get_session(self.database_url) as session:
            removed = session.execute(delete(ImportLock).where(ImportLock.name == self.name)).rowcount
        if removed:
            logger.warning("Import lock force-released", lock_name=self.name)
        return bool(removed)

    def is_locked(self) -> bool:
        """Whether an unexpired lock row exists for this name."""
        with get_session(self.database_url) as session:
            row = session.execute(
                select(ImportLock).where(
                    ImportLock.name == self.name, ImportLock.expires_at > _utcnow()
                )
            ).scalar_one_or_none()
            return row is not None

    @contextmanager
    def held(self) -> Generator[bool, None, None]:
        """
        Scoped acquisition.

        Yields the result of ``acquire()`` and releases on exit, including on
        error paths, when the lock was taken.
        """
        acquired = self.acquire()
        try:
            yield acquired
        finally:
            if acquired:
                self.release()
