"""Error kinds raised by the update log storage layer."""

from __future__ import annotations


class UpdateLogSyncError(Exception):
    """Base class for all update log storage errors."""


class ConfigMissing(UpdateLogSyncError):
    """Raised when an operation needs GitHub configuration and none is loaded."""


class RemoteError(UpdateLogSyncError):
    """Base class for failures talking to the GitHub Contents API."""


class RemoteUnavailable(RemoteError):
    """Raised on transport failures (connection refused, DNS, timeout)."""


class RemoteRejected(RemoteError):
    """Raised when the API answers with a non-success status."""

    def __init__(self, status_code: int, message: str = "GitHub API error"):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class DecodeFailure(UpdateLogSyncError):
    """Raised when remote content is not valid Base64 encoded JSON."""


class LocalStoreFailure(UpdateLogSyncError):
    """Raised when the local cache store cannot persist a value."""
