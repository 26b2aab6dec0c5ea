"""
DesignSync Remote Store Client.

Async HTTP client for a Convex-style function API holding versioned
workspace documents.
Requires Python 3.11+.
"""

import json
from typing import Any

import httpx

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
    SyncOutcome,
    TransientFailure,
    WorkspaceRecord,
    WorkspaceVersionState,
)
from utils.config import get_settings
from utils.logger import LoggerMixin
from utils.retry import with_retry

GET_WORKSPACE = "workspaces:get"
UPDATE_WORKSPACE = "workspaces:update"

CONFLICT_MARKER = "Version conflict"
AUTH_MARKERS = ("Unauthenticated", "Access denied")


def classify_function_error(message: str, status_code: int, data: Any = None) -> RemoteStoreError:
    """Map an error message returned by a remote function to an exception."""
    if CONFLICT_MARKER in message:
        return ConflictError(message)
    if status_code in (401, 403) or any(marker in message for marker in AUTH_MARKERS):
        return AuthenticationError(message, status_code=status_code)
    return RemoteResponseError(status_code, message, response_data=data)


class RemoteStoreClient(LoggerMixin):
    """
    Client for the remote workspace store.

    Queries and mutations are POSTed as ``{"path", "args", "format"}`` to
    ``/api/query`` and ``/api/mutation``. Every failure is raised as a
    RemoteStoreError subclass; ``update_workspace`` folds those into a
    SyncOutcome instead of raising.
    """

    def __init__(
        self,
        url: str,
        token: str | None = None,
        timeout: float | None = None,
        connect_timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            url: Deployment URL of the store
            token: Optional bearer token
            timeout: Request timeout in seconds
            connect_timeout: Timeout for the connectivity probe
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        settings = get_settings().remote
        self._url = url.rstrip("/")
        self._token = token if token is not None else settings.token
        self._timeout = timeout or settings.request_timeout
        self._connect_timeout = connect_timeout or settings.connect_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._connectivity = ConnectivityState.UNKNOWN

    @property
    def url(self) -> str:
        return self._url

    @property
    def connectivity(self) -> ConnectivityState:
        """Last known connectivity state, without a new probe."""
        return self._connectivity

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers = {"Content-Type": "application/json"}
            if self._token:
                headers["Authorization"] = f"Bearer {self._token}"
            self._client = httpx.AsyncClient(
                base_url=self._url,
                headers=headers,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "RemoteStoreClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _call(self, kind: str, path: str, args: dict[str, Any]) -> Any:
        """
        Invoke a remote function.

        Args:
            kind: "query" or "mutation"
            path: Function path, e.g. "workspaces:update"
            args: Function arguments

        Returns:
            The function's return value
        """
        client = await self._get_client()
        body = {"path": path, "args": args, "format": "json"}

        try:
            response = await client.post(f"/api/{kind}", json=body)
        except httpx.RequestError as e:  # ConnectError, TimeoutException, ...
            raise RemoteConnectionError(f"Connection error to {self._url}: {e}") from e

        try:
            data = response.json()
        except json.JSONDecodeError:
            data = None

        if isinstance(data, dict) and data.get("status") == "error":
            message = str(data.get("errorMessage") or "Unknown remote error")
            raise classify_function_error(message, response.status_code, data.get("errorData"))

        if response.is_error:
            message = response.text.strip() or response.reason_phrase
            raise classify_function_error(message, response.status_code, data)

        if not isinstance(data, dict) or data.get("status") != "success":
            raise RemoteResponseError(
                response.status_code,
                "Malformed response body",
                response_data={"raw_text": response.text},
            )

        return data.get("value")

    async def query(self, path: str, args: dict[str, Any]) -> Any:
        return await self._call("query", path, args)

    async def mutation(self, path: str, args: dict[str, Any]) -> Any:
        return await self._call("mutation", path, args)

    async def get_workspace(self, record_id: str) -> WorkspaceRecord | None:
        """
        Read the current workspace record.

        Returns:
            The record, or None if it does not exist or is not visible
        """
        value = await self.query(GET_WORKSPACE, {"id": record_id})
        if value is None:
            return None
        if not isinstance(value, dict):
            raise RemoteResponseError(200, f"Unexpected workspace payload: {type(value).__name__}")
        return WorkspaceRecord.from_dict(value)

    async def read_version_state(
        self,
        record_id: str,
        retries: int | None = None,
    ) -> WorkspaceVersionState:
        """
        Read the record's versions, retrying transient failures.

        A missing record yields the initial state (version 1, event 0).
        Authentication errors are not retried.
        """
        sync_settings = get_settings().sync
        record = await with_retry(
            lambda: self.get_workspace(record_id),
            retry_on=(RemoteConnectionError, RemoteResponseError),
            max_attempts=retries or sync_settings.startup_retries,
            base_delay_ms=sync_settings.retry_base_delay_ms,
            max_delay_ms=sync_settings.retry_max_delay_ms,
        )
        if record is None:
            self.log.info("workspace_not_found", record_id=record_id)
            return WorkspaceVersionState()

        state = record.version_state()
        self.log.info(
            "workspace_loaded",
            record_id=record_id,
            version=state.local_version,
            event_version=state.event_version,
        )
        return state

    async def update_workspace(
        self,
        record_id: str,
        payload: dict[str, Any],
        expected_version: int,
    ) -> SyncOutcome:
        """
        Write the payload if the stored version equals expected_version.

        Never raises for remote failures; they are returned as outcomes.
        """
        try:
            value = await self.mutation(
                UPDATE_WORKSPACE,
                {"id": record_id, "data": payload, "expectedVersion": expected_version},
            )
        except ConflictError as e:
            self.log.warning("update_conflict", record_id=record_id, expected_version=expected_version)
            return Conflict(str(e))
        except TransientRemoteError as e:
            self.log.warning("update_failed", record_id=record_id, error=str(e))
            return TransientFailure(cause=str(e), error=e)

        if not isinstance(value, dict) or not value.get("success"):
            return TransientFailure(cause=f"Unexpected update response: {value!r}")

        if value.get("noChanges"):
            return NoChange()

        event_version = value.get("eventVersion")
        return Applied(int(event_version) if event_version is not None else None)

    async def check_connectivity(self) -> ConnectivityState:
        """Probe the store with a HEAD request."""
        client = await self._get_client()
        try:
            await client.head("/", timeout=self._connect_timeout)
            self._connectivity = ConnectivityState.ONLINE
        except httpx.HTTPError:
            self._connectivity = ConnectivityState.OFFLINE

        self.log.debug("connectivity_checked", state=self._connectivity.value)
        return self._connectivity
