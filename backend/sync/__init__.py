"""
DesignSync Sync Package.

Loads the design file and pushes it to the remote store, one write at
a time.
Requires Python 3.11+.
"""

from sync.coordinator import SyncCoordinator
from sync.exceptions import ConfigurationError, LoadError, SyncError
from sync.loader import DocumentLoader
from sync.reporter import Report, ReportKind, SyncReporter
from sync.session import SyncSession, require_workspace_config

__all__ = [
    "SyncCoordinator",
    "ConfigurationError",
    "LoadError",
    "SyncError",
    "DocumentLoader",
    "Report",
    "ReportKind",
    "SyncReporter",
    "SyncSession",
    "require_workspace_config",
]
