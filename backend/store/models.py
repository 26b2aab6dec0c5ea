"""
DesignSync Store Data Models.

Version state, remote records and sync outcomes.
Requires Python 3.11+.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, TypeAlias


class ConnectivityState(str, Enum):
    """Result of a reachability probe against the remote store."""

    ONLINE = "online"
    OFFLINE = "offline"
    UNKNOWN = "unknown"


@dataclass(slots=True)
class WorkspaceVersionState:
    """
    Client-side view of the remote record's versions.

    local_version mirrors the record's optimistic-concurrency version
    and is sent as expectedVersion on every write. event_version is the
    record's position in its edit history.
    """

    local_version: int = 1
    event_version: int = 0

    def copy(self) -> "WorkspaceVersionState":
        return WorkspaceVersionState(self.local_version, self.event_version)


@dataclass(slots=True)
class WorkspaceRecord:
    """A workspace document as stored remotely."""

    id: str
    version: int
    event_version: int
    max_event_version: int = 0
    name: str | None = None
    data: Any = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "WorkspaceRecord":
        """Build from the store's camelCase JSON document."""
        event_version = int(raw.get("eventVersion", 0))
        return cls(
            id=str(raw.get("_id", raw.get("id", ""))),
            version=int(raw.get("version", 1)),
            event_version=event_version,
            max_event_version=int(raw.get("maxEventVersion", event_version)),
            name=raw.get("name"),
            data=raw.get("data"),
        )

    def version_state(self) -> WorkspaceVersionState:
        return WorkspaceVersionState(
            local_version=self.version,
            event_version=self.event_version,
        )


# Sync outcomes


@dataclass(frozen=True, slots=True)
class Applied:
    """The store accepted the write and advanced the record."""

    event_version: int | None = None


@dataclass(frozen=True, slots=True)
class NoChange:
    """The payload matched the stored record; nothing was written."""


@dataclass(frozen=True, slots=True)
class Conflict:
    """expectedVersion did not match the stored version."""

    message: str = "Version conflict"


@dataclass(frozen=True, slots=True)
class TransientFailure:
    """Transport or server error; the write may be attempted again later."""

    cause: str
    error: BaseException | None = field(default=None, compare=False)


SyncOutcome: TypeAlias = Applied | NoChange | Conflict | TransientFailure


class RemoteStore(Protocol):
    """Operations the sync coordinator needs from the remote store."""

    async def read_version_state(self, record_id: str) -> WorkspaceVersionState:
        ...

    async def update_workspace(
        self,
        record_id: str,
        payload: dict[str, Any],
        expected_version: int,
    ) -> SyncOutcome:
        ...
