"""
DesignSync Sync Exceptions.

Requires Python 3.11+.
"""

from pathlib import Path


class SyncError(Exception):
    """Base exception for synchronizer errors."""


class LoadError(SyncError):
    """Raised when the design file cannot be read or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class ConfigurationError(SyncError):
    """Raised at startup when no remote store is configured."""
