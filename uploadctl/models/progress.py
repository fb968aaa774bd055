"""Progress models for tracking transfer status.

Provides progress events emitted by transfers, the backend's record of a
finished upload, and the summary returned for a whole session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from pydantic import Field

from .base import BaseModel


@dataclass(frozen=True)
class TransferProgress:
    """One progress report for one entry."""

    entry_id: str
    percent: int


class RemoteRecord(BaseModel):
    """What the backend returns for a finished upload."""

    id: str = Field(..., description="Remote upload ID")
    filename: str
    size: int = Field(..., ge=0)
    mime_type: str = Field("", alias="type")
    url: str = Field(..., description="Retrieval URL")
    uploaded_at: datetime = Field(..., alias="uploadedAt")


@dataclass
class OperationResult:
    """Generic operation result."""

    success: bool
    total: int
    succeeded: int
    failed: int
    duration: float
    errors: List[str] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """Calculate success rate percentage."""
        if self.total == 0:
            return 100.0
        return (self.succeeded / self.total) * 100


@dataclass
class UploadSummary(OperationResult):
    """Upload session summary."""

    total_size: int = 0
    uploaded_size: float = 0.0
    records: List[RemoteRecord] = field(default_factory=list)

    @property
    def throughput_mbps(self) -> float:
        """Calculate upload throughput in MB/s."""
        if self.duration == 0:
            return 0.0
        return (self.uploaded_size / (1024 * 1024)) / self.duration
