"""
DesignSync Sync Coordinator.

Single-flight, version-aware push of the latest design payload to the
remote store.
Requires Python 3.11+.
"""

import asyncio
from typing import Any

from store.models import (
    Applied,
    Conflict,
    NoChange,
    RemoteStore,
    SyncOutcome,
    TransientFailure,
    WorkspaceVersionState,
)
from sync.reporter import SyncReporter
from utils.logger import LoggerMixin


class SyncCoordinator(LoggerMixin):
    """
    Coalesces submitted payloads into one outstanding remote write.

    ``submit`` only stores the payload in a single pending slot. A drain
    task, started when none is running, takes the slot, writes it with
    ``expectedVersion = local_version``, applies the outcome and loops
    while a newer payload arrived in the meantime. Intermediate payloads
    are overwritten, never sent.

    All state is touched on the event loop thread only, and outcome
    application contains no await, so it cannot interleave with
    ``submit``.
    """

    def __init__(
        self,
        store: RemoteStore,
        record_id: str,
        reporter: SyncReporter | None = None,
        state: WorkspaceVersionState | None = None,
    ) -> None:
        """
        Initialize the coordinator.

        Args:
            store: Remote store to write to
            record_id: ID of the workspace record
            reporter: Operator reporting sink
            state: Initial version state (normally read by initialize())
        """
        self._store = store
        self._record_id = record_id
        self._reporter = reporter or SyncReporter()
        self._state = state.copy() if state is not None else WorkspaceVersionState()
        self._pending: dict[str, Any] | None = None
        self._task: asyncio.Task[None] | None = None
        self._closed = False
        self._attempts = 0
        self._last_outcome: SyncOutcome | None = None

    async def initialize(self) -> WorkspaceVersionState:
        """Seed the version state from the remote record."""
        self._state = await self._store.read_version_state(self._record_id)
        self.log.info(
            "version_state_seeded",
            record_id=self._record_id,
            local_version=self._state.local_version,
            event_version=self._state.event_version,
        )
        return self.state

    def submit(self, payload: dict[str, Any]) -> None:
        """
        Offer a new payload for syncing.

        Returns immediately. If a write is in flight the payload replaces
        any earlier pending one and is sent once that write resolves.
        Must be called from the event loop thread.
        """
        if self._closed:
            self.log.debug("submit_after_shutdown_ignored")
            return

        self._pending = payload
        if self._task is not None:
            self.log.debug("payload_coalesced")
            return

        self._task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        try:
            while self._pending is not None and not self._closed:
                payload, self._pending = self._pending, None
                outcome = await self._run_attempt(payload)
                self._apply_outcome(outcome)
        finally:
            self._task = None

    async def _run_attempt(self, payload: dict[str, Any]) -> SyncOutcome:
        """Issue one versioned write and wait for its outcome."""
        self._attempts += 1
        expected_version = self._state.local_version
        self._reporter.syncing()
        self.log.debug("attempt_started", attempt=self._attempts, expected_version=expected_version)

        try:
            return await self._store.update_workspace(self._record_id, payload, expected_version)
        except Exception as e:
            self.log.exception("attempt_failed_unexpectedly", attempt=self._attempts)
            return TransientFailure(cause=str(e) or type(e).__name__, error=e)

    def _apply_outcome(self, outcome: SyncOutcome) -> None:
        self._last_outcome = outcome

        if isinstance(outcome, Applied):
            new_event_version = outcome.event_version
            if new_event_version is None:
                # Store did not echo it; each applied write advances history by one
                new_event_version = self._state.event_version + 1
            self._state.local_version += 1
            self._state.event_version = new_event_version
            self.log.info(
                "sync_applied",
                local_version=self._state.local_version,
                event_version=new_event_version,
            )
            self._reporter.synced(new_event_version)
        elif isinstance(outcome, NoChange):
            self._reporter.no_changes()
        elif isinstance(outcome, Conflict):
            self.log.warning("sync_conflict", expected_version=self._state.local_version)
            self._reporter.conflict()
        elif isinstance(outcome, TransientFailure):
            self._reporter.error(outcome.cause)
        else:
            raise TypeError(f"Unknown sync outcome: {outcome!r}")

    async def wait_idle(self) -> None:
        """Wait until no write is in flight and nothing is pending."""
        while self._task is not None:
            await asyncio.shield(self._task)

    async def shutdown(self) -> None:
        """
        Stop scheduling new writes.

        A write already in flight is allowed to finish; anything pending
        or submitted afterwards is dropped.
        """
        self._closed = True
        if self._pending is not None:
            self.log.info("pending_payload_dropped_on_shutdown")
        await self.wait_idle()
        self._pending = None

    @property
    def state(self) -> WorkspaceVersionState:
        """Snapshot of the version state."""
        return self._state.copy()

    @property
    def record_id(self) -> str:
        return self._record_id

    @property
    def is_idle(self) -> bool:
        return self._task is None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    @property
    def attempts(self) -> int:
        """Number of remote writes issued so far."""
        return self._attempts

    @property
    def last_outcome(self) -> SyncOutcome | None:
        return self._last_outcome
