"""Data models for uploadctl.

Provides models for queued files, upload sessions and transfer progress.
"""

from __future__ import annotations

from .base import BaseModel
from .entry import EntryStatus, FileCategory, FileEntry
from .progress import OperationResult, RemoteRecord, TransferProgress, UploadSummary
from .session import SessionSnapshot, SessionStatus, UploadSession
from .source import FileSource, guess_mime_type

__all__ = [
    # Base
    "BaseModel",
    # Queue
    "FileSource",
    "guess_mime_type",
    "EntryStatus",
    "FileCategory",
    "FileEntry",
    # Session
    "SessionStatus",
    "UploadSession",
    "SessionSnapshot",
    # Progress
    "TransferProgress",
    "RemoteRecord",
    "OperationResult",
    "UploadSummary",
]
