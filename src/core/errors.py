# src/core/errors.py - v1
"""Error taxonomy shared by every sync stage.

Local failures (bad input, oversized files) derive from InvalidInputError or
FileTooLargeError. Remote failures derive from RemoteError and carry the
HTTP status and the decoded error payload for diagnostics. The pipeline
wraps the first failing stage's error in DeploymentFailed.
"""

from __future__ import annotations

from typing import Any


class PageSyncError(Exception):
    """Base class for all pagesync errors."""


class InvalidInputError(PageSyncError):
    """Caller-supplied input is unusable. Never retried."""


class NotFoundError(InvalidInputError):
    """A required local path does not exist."""


class ValidationError(InvalidInputError):
    """An upload payload failed field validation before sending."""


class FileTooLargeError(PageSyncError):
    """A file exceeds the configured per-file size limit."""

    def __init__(self, path: str, size_bytes: int, limit_bytes: int) -> None:
        self.path = path
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(
            f"File too large: {path} ({size_bytes} bytes, limit {limit_bytes} bytes)"
        )


class RemoteError(PageSyncError):
    """Failure reported by, or while reaching, the remote artifact store."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        payload: Any = None,
    ) -> None:
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)


class AuthenticationError(RemoteError):
    """Credential rejected (401/403) or missing. Not retried."""


class RemoteServiceError(RemoteError):
    """Remote store answered with a non-auth 4xx/5xx or a failed envelope."""


class NetworkError(RemoteError):
    """Transport-level failure: connection, DNS, TLS or timeout."""


class PartialUploadFailure(PageSyncError):
    """The upload call reported keys it could not store."""

    def __init__(self, unsuccessful_keys: list[str], successful_count: int = 0) -> None:
        self.unsuccessful_keys = list(unsuccessful_keys)
        self.successful_count = successful_count
        preview = ", ".join(self.unsuccessful_keys[:5])
        if len(self.unsuccessful_keys) > 5:
            preview += ", ..."
        super().__init__(
            f"{len(self.unsuccessful_keys)} asset(s) failed to upload: {preview}"
        )


class DeploymentCancelled(PageSyncError):
    """The run was cancelled before a manifest was submitted."""

    def __init__(self, stage: str = "run") -> None:
        self.stage = stage
        super().__init__(f"{stage} cancelled")


class DeploymentFailed(PageSyncError):
    """A pipeline stage failed; identifies the stage and the project."""

    def __init__(
        self,
        stage: str,
        project: str,
        message: str,
        cause: BaseException | None = None,
    ) -> None:
        self.stage = stage
        self.project = project
        self.message = message
        self.cause = cause
        super().__init__(f"[{project}] {stage} failed: {message}")

    @property
    def error_type(self) -> str:
        return type(self.cause).__name__ if self.cause is not None else "DeploymentFailed"

    @property
    def retryable(self) -> bool:
        """Whether re-running the whole pipeline may succeed unchanged."""
        return isinstance(self.cause, NetworkError)
