"""
DesignSync Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

import asyncio
import copy
import io
import json
from pathlib import Path
from typing import Any, Generator

import pytest

from store.models import (
    Applied,
    Conflict,
    NoChange,
    SyncOutcome,
    WorkspaceVersionState,
)
from sync.reporter import SyncReporter
from utils.config import get_settings


class FakeRemoteStore:
    """
    In-process stand-in for the remote workspace store.

    Applies the store's rules: a version mismatch is a conflict, an
    identical payload is a no-op, anything else bumps both versions.
    Writes can be held open with ``gate`` to observe in-flight state.
    """

    def __init__(
        self,
        version: int = 1,
        event_version: int = 0,
        data: Any = None,
        exists: bool = True,
    ) -> None:
        self.version = version
        self.event_version = event_version
        self.data = data
        self.exists = exists
        self.calls: list[tuple[dict[str, Any], int]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.gate: asyncio.Event | None = None
        self.scripted: list[SyncOutcome] = []
        self.raise_on_write: Exception | None = None
        self.raise_on_read: Exception | None = None

    async def read_version_state(self, record_id: str) -> WorkspaceVersionState:
        if self.raise_on_read is not None:
            raise self.raise_on_read
        if not self.exists:
            return WorkspaceVersionState()
        return WorkspaceVersionState(self.version, self.event_version)

    async def update_workspace(
        self,
        record_id: str,
        payload: dict[str, Any],
        expected_version: int,
    ) -> SyncOutcome:
        self.calls.append((copy.deepcopy(payload), expected_version))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            else:
                await asyncio.sleep(0)

            if self.raise_on_write is not None:
                raise self.raise_on_write
            if self.scripted:
                return self.scripted.pop(0)
            if expected_version != self.version:
                return Conflict()
            if payload == self.data:
                return NoChange()

            self.data = copy.deepcopy(payload)
            self.version += 1
            self.event_version += 1
            return Applied(self.event_version)
        finally:
            self.in_flight -= 1

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [payload for payload, _ in self.calls]


async def wait_for_calls(store: FakeRemoteStore, count: int, timeout: float = 2.0) -> None:
    """Yield to the loop until the store has seen ``count`` writes."""
    async def _poll() -> None:
        while len(store.calls) < count:
            await asyncio.sleep(0.001)

    await asyncio.wait_for(_poll(), timeout)


@pytest.fixture
def store() -> FakeRemoteStore:
    """A fake store holding an empty record at version 1."""
    return FakeRemoteStore()


@pytest.fixture
def out_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def err_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def reporter(out_stream: io.StringIO, err_stream: io.StringIO) -> SyncReporter:
    """Reporter writing to in-memory streams."""
    return SyncReporter(stream=out_stream, err_stream=err_stream)


@pytest.fixture
def design_file(tmp_path: Path) -> Path:
    """A design file with a minimal document."""
    path = tmp_path / "design.json"
    path.write_text(json.dumps({"id": "ws_test", "version": "1.0", "name": "Test", "components": {}}))
    return path


@pytest.fixture
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear remote env vars and the settings cache, with instant retries."""
    for name in ("REMOTE_URL", "REMOTE_WORKSPACE_ID", "REMOTE_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SYNC_RETRY_BASE_DELAY_MS", "0")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
