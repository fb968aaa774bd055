"""Upload session models.

An ``UploadSession`` is one transfer run over the entries that were pending
when it started. A ``SessionSnapshot`` is the aggregate view derived from it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import ConfigDict, Field

from .base import BaseModel


class SessionStatus(str, Enum):
    """Lifecycle of an upload session. ``NONE`` means no session exists."""

    NONE = "none"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ERROR = "error"


class UploadSession(BaseModel):
    """Mutable state of the current transfer run."""

    model_config = ConfigDict(validate_assignment=True)

    status: SessionStatus = SessionStatus.UPLOADING
    entry_ids: tuple[str, ...] = Field(..., description="Participating entry IDs")
    total_files: int = Field(..., ge=0)
    completed_files: int = Field(0, ge=0)
    total_size: int = Field(..., ge=0, description="Bytes, fixed at start")
    uploaded_size: float = Field(0.0, ge=0)
    start_time: float = Field(..., description="Monotonic clock reading at start")
    end_time: float | None = Field(None, description="Monotonic clock reading when all transfers ended")
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def record_uploaded(self, uploaded: float) -> None:
        """Raise ``uploaded_size`` to ``uploaded``, never lowering it."""
        uploaded = min(float(self.total_size), uploaded)
        if uploaded > self.uploaded_size:
            self.uploaded_size = uploaded

    def record_completed_file(self) -> None:
        """Count one more successful transfer."""
        self.completed_files = min(self.total_files, self.completed_files + 1)


class SessionSnapshot(BaseModel):
    """Read-only aggregate view of a session for presentation."""

    model_config = ConfigDict(frozen=True)

    status: SessionStatus
    total_files: int = 0
    completed_files: int = 0
    total_size: int = 0
    uploaded_size: float = 0.0
    percent: float = 0.0
    elapsed: float = 0.0
    throughput: float | None = Field(None, description="Bytes per second")
    eta_seconds: float | None = None
    eta: str = ""

    @classmethod
    def empty(cls) -> SessionSnapshot:
        """Snapshot used when no session exists."""
        return cls(status=SessionStatus.NONE)

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.UPLOADING
