"""
DesignSync Utilities Package.

Common utilities shared across all backend modules.
Requires Python 3.11+.
"""

from utils.config import (
    Settings,
    WorkspaceConfig,
    get_settings,
    load_workspace_config,
    resolve_workspace_config,
    save_workspace_config,
)
from utils.logger import (
    LoggerMixin,
    bind_sync_context,
    clear_sync_context,
    close_log_file,
    configure_logging,
    get_logger,
    logger,
)
from utils.retry import with_retry

__all__ = [
    "Settings",
    "WorkspaceConfig",
    "get_settings",
    "load_workspace_config",
    "resolve_workspace_config",
    "save_workspace_config",
    "configure_logging",
    "get_logger",
    "logger",
    "LoggerMixin",
    "bind_sync_context",
    "clear_sync_context",
    "close_log_file",
    "with_retry",
]
