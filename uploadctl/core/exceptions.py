"""Exception hierarchy for uploadctl.

Provides typed exceptions for different failure modes with clear error messages.
"""

from __future__ import annotations

from typing import Any


class UploadCtlError(Exception):
    """Base exception for all uploadctl errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(UploadCtlError):
    """Error in configuration (missing, invalid, or malformed)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ProfileNotFoundError(ConfigurationError):
    """Requested profile does not exist."""

    def __init__(self, profile: str):
        super().__init__(f"Profile not found: {profile}", field="profile", value=profile)
        self.profile = profile


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(UploadCtlError):
    """A candidate file was rejected at selection time.

    The message is what the user sees, so no details are appended to it.
    """

    def __init__(self, message: str, filename: str | None = None):
        super().__init__(message)
        self.filename = filename


class FileTooLargeError(ValidationError):
    """Candidate exceeds the maximum upload size."""

    def __init__(self, filename: str, size: int, limit: int):
        limit_mb = limit // (1024 * 1024)
        super().__init__(f"File too large (max {limit_mb}MB)", filename)
        self.size = size
        self.limit = limit


class TypeNotAllowedError(ValidationError):
    """Candidate extension is not in the allow-list."""

    def __init__(self, filename: str, extension: str, allowed: frozenset[str]):
        super().__init__(f"File type .{extension} is not allowed", filename)
        self.extension = extension
        self.allowed = allowed


# =============================================================================
# Thumbnail Errors
# =============================================================================


class ThumbnailError(UploadCtlError):
    """Preview generation failed. Never fatal to queueing or upload."""

    def __init__(self, filename: str, reason: str = ""):
        msg = f"Failed to generate thumbnail for {filename}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg, {"file": filename})
        self.filename = filename
        self.reason = reason


# =============================================================================
# Operation Errors
# =============================================================================


class OperationError(UploadCtlError):
    """Error during an operation."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        full_details = {"operation": operation}
        if details:
            full_details.update(details)
        super().__init__(message, full_details)
        self.operation = operation


class TransferError(OperationError):
    """A single file transfer failed.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, cause: str, filename: str | None = None):
        details = {"file": filename} if filename else None
        super().__init__("upload", f"Upload failed: {cause}", details)
        self.cause = cause
        self.filename = filename

    def __str__(self) -> str:
        return self.message


class NoPendingFilesError(OperationError):
    """An upload was requested but nothing is queued."""

    def __init__(self) -> None:
        super().__init__("start_upload", "No files to upload")


class SessionBusyError(OperationError):
    """An upload session is already running."""

    def __init__(self, operation: str = "start_upload"):
        super().__init__(operation, "An upload session is already in progress")


class InvalidStatusTransitionError(OperationError):
    """A registry update tried to move an entry backwards in its lifecycle."""

    def __init__(self, entry_id: str, current: str, requested: str):
        super().__init__(
            "update_entry",
            f"Cannot move entry from {current} to {requested}",
            {"entry": entry_id},
        )
        self.entry_id = entry_id
        self.current = current
        self.requested = requested
