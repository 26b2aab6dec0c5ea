"""
DesignSync Operator Reporting.

Human-readable status lines for the person running the synchronizer.
Requires Python 3.11+.
"""

import sys
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TextIO

from utils.logger import LoggerMixin

RELOAD_DIRECTIVE = "please reload to get latest version"


class ReportKind(str, Enum):
    """Classification of an operator-visible line."""

    SYNCING = "syncing"
    SYNCED = "synced"
    NO_CHANGES = "no_changes"
    CONFLICT = "conflict"
    ERROR = "error"
    LOAD_ERROR = "load_error"


@dataclass(slots=True)
class Report:
    """A single line shown to the operator."""

    kind: ReportKind
    message: str
    timestamp: datetime = field(default_factory=datetime.now)
    event_version: int | None = None


class SyncReporter(LoggerMixin):
    """
    Writes one line per sync event.

    Progress goes to stdout, failures to stderr. Every line is also
    kept in a bounded in-memory history and mirrored to the structured
    log.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        err_stream: TextIO | None = None,
        history_size: int = 100,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._stream = stream
        self._err_stream = err_stream
        self._clock = clock
        self.history: deque[Report] = deque(maxlen=history_size)

    def _emit(self, kind: ReportKind, message: str, *, error: bool = False, event_version: int | None = None) -> Report:
        report = Report(kind=kind, message=message, timestamp=self._clock(), event_version=event_version)
        self.history.append(report)

        # Resolve at write time so redirected/captured streams are honored
        stream = (self._err_stream or sys.stderr) if error else (self._stream or sys.stdout)
        print(message, file=stream, flush=True)

        if error:
            self.log.warning("sync_report", kind=kind.value, message=message)
        else:
            self.log.debug("sync_report", kind=kind.value, message=message)
        return report

    def syncing(self) -> Report:
        return self._emit(ReportKind.SYNCING, f"[{self._clock():%H:%M:%S}] Syncing design...")

    def synced(self, event_version: int) -> Report:
        return self._emit(ReportKind.SYNCED, f"✓ Synced (v{event_version})", event_version=event_version)

    def no_changes(self) -> Report:
        return self._emit(ReportKind.NO_CHANGES, "✓ No changes detected")

    def conflict(self) -> Report:
        return self._emit(ReportKind.CONFLICT, f"✗ Conflict detected - {RELOAD_DIRECTIVE}", error=True)

    def error(self, cause: str) -> Report:
        return self._emit(ReportKind.ERROR, f"⚠ Sync failed: {cause}", error=True)

    def load_failed(self, cause: Exception | str) -> Report:
        return self._emit(ReportKind.LOAD_ERROR, f"✗ Error reading file: {cause}", error=True)

    @property
    def last(self) -> Report | None:
        return self.history[-1] if self.history else None

    def kinds(self) -> list[ReportKind]:
        return [report.kind for report in self.history]
