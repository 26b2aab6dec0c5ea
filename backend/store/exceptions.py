"""
DesignSync Store Exceptions.

Requires Python 3.11+.
"""

from typing import Any


class RemoteStoreError(Exception):
    """Base exception for remote store errors."""


class ConflictError(RemoteStoreError):
    """Raised when expectedVersion does not match the stored version."""


class TransientRemoteError(RemoteStoreError):
    """Raised for network or server failures."""


class RemoteConnectionError(TransientRemoteError):
    """Raised when the store cannot be reached."""


class RemoteResponseError(TransientRemoteError):
    """Raised for non-2xx responses, function errors or unparseable bodies."""

    def __init__(self, status_code: int, message: str, response_data: Any = None) -> None:
        super().__init__(f"Remote error {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.response_data = response_data


class AuthenticationError(TransientRemoteError):
    """Raised when the store rejects the caller's identity or access."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
