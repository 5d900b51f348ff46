"""
Test doubles and filesystem helpers.
"""

import os
from pathlib import Path


class RecordingEngine:
    """Transform engine double that records the groups it was asked to import."""

    def __init__(self, error: Exception | None = None):
        self.calls: list[str] = []
        self.error = error

    def import_group(self, group_id: str) -> None:
        self.calls.append(group_id)
        if self.error is not None:
            raise self.error


def make_batch(root: Path, name: str, files: dict[str, str] | None = None) -> Path:
    """Create a batch directory holding the given relative files."""
    batch_dir = root / name
    batch_dir.mkdir(parents=True)
    for relative, content in (files or {}).items():
        path = batch_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return batch_dir


def set_mtime(path: Path, seconds: int) -> None:
    ns = seconds * 1_000_000_000
    os.utime(path, ns=(ns, ns))
