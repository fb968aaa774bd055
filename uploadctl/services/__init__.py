"""Service layer for uploadctl.

Provides the entry registry, session aggregation, thumbnail generation and
the upload orchestrator that ties them together.
"""

from __future__ import annotations

from .aggregator import SessionAggregator, format_eta
from .notifications import LoggingNotifier, NotificationKind, Notifier
from .orchestrator import ChangeKind, StateChange, UploadOrchestrator
from .registry import EntryRegistry
from .thumbnails import ThumbnailProducer

__all__ = [
    "EntryRegistry",
    "SessionAggregator",
    "format_eta",
    "ThumbnailProducer",
    "NotificationKind",
    "Notifier",
    "LoggingNotifier",
    "ChangeKind",
    "StateChange",
    "UploadOrchestrator",
]
