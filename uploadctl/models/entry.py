"""Queue entry model: one selected file and its transfer state."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import ConfigDict, Field, InstanceOf

from .base import BaseModel
from .source import FileSource


class EntryStatus(str, Enum):
    """Lifecycle of a queued file."""

    PENDING = "pending"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ERROR = "error"

    def can_transition_to(self, target: EntryStatus) -> bool:
        """Check whether moving to ``target`` respects the lifecycle."""
        return target == self or target in _TRANSITIONS[self]


_TRANSITIONS: dict[EntryStatus, frozenset[EntryStatus]] = {
    EntryStatus.PENDING: frozenset({EntryStatus.UPLOADING, EntryStatus.ERROR}),
    EntryStatus.UPLOADING: frozenset({EntryStatus.COMPLETED, EntryStatus.ERROR}),
    EntryStatus.COMPLETED: frozenset(),
    EntryStatus.ERROR: frozenset(),
}


class FileCategory(str, Enum):
    """Coarse grouping of MIME types for display."""

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    PDF = "pdf"
    DOCUMENT = "document"
    SPREADSHEET = "spreadsheet"
    PRESENTATION = "presentation"
    OTHER = "other"

    @classmethod
    def from_mime_type(cls, mime_type: str) -> FileCategory:
        """Classify a MIME type."""
        mime_type = mime_type.lower()
        if mime_type.startswith("image/"):
            return cls.IMAGE
        if mime_type.startswith("video/"):
            return cls.VIDEO
        if mime_type.startswith("audio/"):
            return cls.AUDIO
        if "pdf" in mime_type:
            return cls.PDF
        if "sheet" in mime_type or "excel" in mime_type:
            return cls.SPREADSHEET
        if "presentation" in mime_type or "powerpoint" in mime_type:
            return cls.PRESENTATION
        if "word" in mime_type or "document" in mime_type:
            return cls.DOCUMENT
        return cls.OTHER


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FileEntry(BaseModel):
    """One queued file.

    Records are immutable; the registry replaces them with merged copies.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Opaque unique entry ID")
    name: str = Field(..., description="File name")
    size: int = Field(..., ge=0, description="Size in bytes")
    mime_type: str = Field(..., description="MIME type")
    status: EntryStatus = Field(EntryStatus.PENDING, description="Transfer status")
    progress: int = Field(0, ge=0, le=100, description="Percent transferred")
    thumbnail: str | None = Field(None, description="Inline preview image (data URL)")
    created_at: datetime = Field(default_factory=_utcnow, description="Queue time")
    error: str | None = Field(None, description="Transfer failure message")
    remote_url: str | None = Field(None, description="Retrieval URL after upload")
    source: InstanceOf[FileSource] = Field(..., exclude=True, repr=False)

    @classmethod
    def from_source(cls, entry_id: str, source: FileSource) -> FileEntry:
        """Create a pending entry for a validated source."""
        return cls(
            id=entry_id,
            name=source.name,
            size=source.size,
            mime_type=source.mime_type,
            source=source,
        )

    @property
    def category(self) -> FileCategory:
        return FileCategory.from_mime_type(self.mime_type)

