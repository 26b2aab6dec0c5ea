"""
DesignSync File Watcher.

Cross-platform monitoring of a single design file using watchdog.
Requires Python 3.11+.
"""

import asyncio
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from watchdog.observers import Observer
from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    DirCreatedEvent,
    DirModifiedEvent,
    DirMovedEvent,
)

from watcher.debouncer import Debouncer
from utils.config import get_settings
from utils.logger import LoggerMixin


def _normalize(path: str | bytes | os.PathLike[str]) -> str:
    return os.path.normcase(os.path.abspath(os.fsdecode(path)))


class DesignFileHandler(FileSystemEventHandler, LoggerMixin):
    """
    Turns file system events for one path into debouncer ticks.

    Events for other files in the directory and directory events are
    ignored. A move onto the watched path counts as a change, since
    many editors save by writing a temp file and renaming it.
    """

    def __init__(self, target: Path, debouncer: Debouncer) -> None:
        """
        Initialize the file handler.

        Args:
            target: The single file to watch
            debouncer: Debouncer that absorbs the ticks
        """
        super().__init__()
        self._target = _normalize(target)
        self._debouncer = debouncer

    def _is_target(self, path: str | bytes) -> bool:
        return bool(path) and _normalize(path) == self._target

    def _tick(self, kind: str, event: FileSystemEvent) -> None:
        self.log.debug(kind, path=event.src_path)
        self._debouncer.debounce()

    def on_created(self, event: FileCreatedEvent | DirCreatedEvent) -> None:
        """Handle file creation."""
        if isinstance(event, DirCreatedEvent) or not self._is_target(event.src_path):
            return
        self._tick("file_created", event)

    def on_modified(self, event: FileModifiedEvent | DirModifiedEvent) -> None:
        """Handle file modification."""
        if isinstance(event, DirModifiedEvent) or not self._is_target(event.src_path):
            return
        self._tick("file_modified", event)

    def on_moved(self, event: FileMovedEvent | DirMovedEvent) -> None:
        """Handle a rename onto the watched path."""
        if isinstance(event, DirMovedEvent) or not self._is_target(event.dest_path):
            return
        self._tick("file_replaced", event)


class FileWatcher(LoggerMixin):
    """
    Watches one file for content changes.

    Schedules a non-recursive observer on the file's parent directory
    and debounces the resulting ticks.
    """

    def __init__(
        self,
        path: Path,
        on_settle: Callable[[], Any] | None = None,
        debounce_delay_ms: int | None = None,
    ) -> None:
        """
        Initialize the file watcher.

        Args:
            path: File to watch
            on_settle: Callback (sync or async) once edits have settled
            debounce_delay_ms: Quiet period in milliseconds
        """
        settings = get_settings()

        self._path = path.resolve()
        self._debounce_delay = (
            debounce_delay_ms if debounce_delay_ms is not None else settings.sync.debounce_delay_ms
        )

        self._debouncer = Debouncer(
            delay_ms=self._debounce_delay,
            callback=on_settle,
        )

        self._handler = DesignFileHandler(
            target=self._path,
            debouncer=self._debouncer,
        )

        self._observer: Observer | None = None
        self._running = False

    def set_callback(self, callback: Callable[[], Any]) -> None:
        """Set or update the settle callback."""
        self._debouncer.set_callback(callback)

    def set_event_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Set the event loop for async callbacks."""
        self._debouncer.set_event_loop(loop)

    def start(self) -> None:
        """Start watching for file changes."""
        if self._running:
            return

        self._observer = Observer()
        self._observer.schedule(
            self._handler,
            str(self._path.parent),
            recursive=False,
        )
        self._observer.start()
        self._running = True

        self.log.info(
            "file_watcher_started",
            path=str(self._path),
            debounce_ms=self._debounce_delay,
        )

    def stop(self) -> None:
        """Stop watching; pending ticks are dropped."""
        if not self._running:
            return

        self._debouncer.cancel()

        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5.0)
            self._observer = None

        self._running = False
        self.log.info("file_watcher_stopped")

    def flush(self) -> bool:
        """Immediately fire the settle callback if ticks are pending."""
        return self._debouncer.flush()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def handler(self) -> DesignFileHandler:
        return self._handler

    @property
    def is_running(self) -> bool:
        """Check if the watcher is running."""
        return self._running

    @property
    def pending_count(self) -> int:
        """Get number of ticks waiting to settle."""
        return self._debouncer.pending_count

    def __enter__(self) -> "FileWatcher":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.stop()
