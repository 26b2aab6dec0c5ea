"""
DesignSync Session.

Wires the file watcher, loader and coordinator into one watch loop.
Requires Python 3.11+.
"""

import asyncio
from pathlib import Path

from store.exceptions import RemoteStoreError
from store.models import RemoteStore
from sync.coordinator import SyncCoordinator
from sync.exceptions import ConfigurationError, LoadError
from sync.loader import DocumentLoader
from sync.reporter import SyncReporter
from utils.config import Settings, WorkspaceConfig, resolve_workspace_config
from utils.logger import LoggerMixin, bind_sync_context, clear_sync_context
from watcher.file_watcher import FileWatcher

CONFIG_DIRECTIVE = (
    'Run "designsync" from a linked project, or create {config_file} with '
    '"convexUrl" and "workspaceId" (or set REMOTE_URL and REMOTE_WORKSPACE_ID).'
)


def require_workspace_config(settings: Settings) -> WorkspaceConfig:
    """
    Resolve the remote record to sync with.

    Raises:
        ConfigurationError: Neither environment nor config file names one
    """
    workspace = resolve_workspace_config(settings)
    if workspace is None:
        config_file = settings.sync.config_dir / "config.json"
        raise ConfigurationError(
            "No remote configuration found. " + CONFIG_DIRECTIVE.format(config_file=config_file)
        )
    return workspace


class SyncSession(LoggerMixin):
    """
    One run of the synchronizer for a single design file.

    Settles from the watcher are dispatched onto the event loop, where
    the file is loaded and handed to the coordinator.
    """

    def __init__(
        self,
        design_file: Path,
        workspace: WorkspaceConfig,
        store: RemoteStore,
        reporter: SyncReporter | None = None,
        debounce_delay_ms: int | None = None,
    ) -> None:
        self.workspace = workspace
        self.reporter = reporter or SyncReporter()
        self.loader = DocumentLoader(design_file)
        self.coordinator = SyncCoordinator(store, workspace.workspace_id, self.reporter)
        self.watcher = FileWatcher(
            design_file,
            on_settle=self.on_settle,
            debounce_delay_ms=debounce_delay_ms,
        )

    async def on_settle(self) -> None:
        """Load the file and submit it; load failures abandon the cycle."""
        try:
            payload = self.loader.load()
        except LoadError as e:
            self.log.warning("load_failed", path=str(e.path), reason=e.reason)
            self.reporter.load_failed(e)
            return
        except Exception as e:
            self.log.exception("settle_failed")
            self.reporter.load_failed(str(e) or type(e).__name__)
            return

        self.coordinator.submit(payload)

    async def start(self) -> None:
        """Seed version state and begin watching."""
        bind_sync_context(record_id=self.workspace.workspace_id, design_file=str(self.watcher.path))
        try:
            await self.coordinator.initialize()
        except RemoteStoreError as e:
            # Not fatal: a stale version surfaces later as a conflict
            self.log.error("initial_read_failed", error=str(e))
            self.reporter.error(f"could not read remote workspace: {e}")

        self.watcher.set_event_loop(asyncio.get_running_loop())
        self.watcher.start()

    async def stop(self) -> None:
        """Stop watching and let an in-flight write finish."""
        self.watcher.stop()
        await self.coordinator.shutdown()
        clear_sync_context()

    async def run(self, stop_event: asyncio.Event) -> None:
        """Watch until stop_event is set."""
        await self.start()
        try:
            await stop_event.wait()
        finally:
            await self.stop()
