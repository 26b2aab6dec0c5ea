"""
DesignSync Remote Store Package.

Client and data model for the versioned workspace store.
Requires Python 3.11+.
"""

from store.client import RemoteStoreClient
from store.exceptions import (
    AuthenticationError,
    ConflictError,
    RemoteConnectionError,
    RemoteResponseError,
    RemoteStoreError,
    TransientRemoteError,
)
from store.models import (
    Applied,
    Conflict,
    ConnectivityState,
    NoChange,
    RemoteStore,
    SyncOutcome,
    TransientFailure,
    WorkspaceRecord,
    WorkspaceVersionState,
)

__all__ = [
    "RemoteStoreClient",
    "AuthenticationError",
    "ConflictError",
    "RemoteConnectionError",
    "RemoteResponseError",
    "RemoteStoreError",
    "TransientRemoteError",
    "Applied",
    "Conflict",
    "ConnectivityState",
    "NoChange",
    "RemoteStore",
    "SyncOutcome",
    "TransientFailure",
    "WorkspaceRecord",
    "WorkspaceVersionState",
]
