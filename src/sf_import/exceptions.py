"""Custom exceptions for SF Import.

This module defines exception classes for the error conditions that can
occur while locking, checking, staging, importing and archiving JSON batches.
"""


class SFImportError(Exception):
    """Base exception for all SF Import errors."""

    pass


class ConfigurationError(SFImportError):
    """Raised when configuration is invalid or missing."""

    pass


class StateError(SFImportError):
    """Raised when state database operations fail."""

    pass


class ImportStepError(SFImportError):
    """Base class for failures inside a single batch import."""

    pass


class StagingIOError(ImportStepError):
    """Raised when scanning or copying JSON files fails."""

    pass


class TransformEngineError(ImportStepError):
    """Raised when the external transform engine fails."""

    def __init__(self, message: str, group_id: str | None = None, returncode: int | None = None):
        """Initialize transform engine error.

        Args:
            message: Error message
            group_id: Migration group being imported
            returncode: Exit code of the engine process, if any
        """
        self.message = message
        self.group_id = group_id
        self.returncode = returncode
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with group and exit code."""
        msg = self.message
        if self.group_id:
            msg = f"[{self.group_id}] {msg}"
        if self.returncode is not None:
            msg = f"{msg} (exit code {self.returncode})"
        return msg


class ArchivalIOError(ImportStepError):
    """Raised when moving a batch to backup or deleting it fails."""

    pass
