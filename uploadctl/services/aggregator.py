"""Session aggregation: bytes transferred, throughput and ETA.

The computation reads the registry's latest entries and never mutates them.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable, Collection, Iterable

from uploadctl.models.entry import EntryStatus, FileEntry
from uploadctl.models.session import SessionSnapshot, SessionStatus, UploadSession

ETA_UNAVAILABLE = "Calculating..."


def entry_contribution(entry: FileEntry) -> float:
    """Bytes an entry contributes to its session's uploaded size."""
    if entry.status == EntryStatus.COMPLETED:
        return float(entry.size)
    if entry.status == EntryStatus.UPLOADING:
        return entry.size * entry.progress / 100
    if entry.status in (EntryStatus.PENDING, EntryStatus.ERROR):
        return 0.0
    raise AssertionError(f"Unhandled entry status: {entry.status}")


def uploaded_bytes(entries: Iterable[FileEntry], participant_ids: Collection[str]) -> float:
    """Sum the contributions of the entries taking part in a session."""
    return sum(entry_contribution(e) for e in entries if e.id in participant_ids)


def estimate_throughput(uploaded: float, elapsed: float) -> float | None:
    """Bytes per second, or None before any time has elapsed."""
    if elapsed <= 0:
        return None
    return uploaded / elapsed


def estimate_remaining(total: float, uploaded: float, throughput: float | None) -> float | None:
    """Seconds left at the current rate, or None while the rate is unknown."""
    if not throughput:
        return None
    return max(0.0, total - uploaded) / throughput


def format_eta(seconds: float | None) -> str:
    """Bucket a remaining time into seconds, minutes or hours, rounded up."""
    if seconds is None:
        return ETA_UNAVAILABLE
    if seconds < 60:
        return f"{math.ceil(seconds)}s remaining"
    if seconds < 3600:
        return f"{math.ceil(seconds / 60)}m remaining"
    return f"{math.ceil(seconds / 3600)}h remaining"


class SessionAggregator:
    """Derives ``SessionSnapshot`` values from a session and the registry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self.clock = clock

    def compute(
        self,
        session: UploadSession | None,
        entries: Iterable[FileEntry],
    ) -> SessionSnapshot:
        """Build a snapshot without changing anything.

        While transfers are running, the uploaded size is the larger of the
        recomputed value and the value already recorded, so entries that
        fail or are removed mid-session never make it go backwards. Once the
        session has ended the recorded value is final.
        """
        if session is None:
            return SessionSnapshot.empty()

        if session.end_time is None:
            computed = uploaded_bytes(entries, frozenset(session.entry_ids))
            uploaded = min(float(session.total_size), max(session.uploaded_size, computed))
        else:
            uploaded = session.uploaded_size

        end = session.end_time if session.end_time is not None else self.clock()
        elapsed = max(0.0, end - session.start_time)
        throughput = estimate_throughput(uploaded, elapsed)
        remaining = estimate_remaining(session.total_size, uploaded, throughput)

        if session.total_size:
            percent = uploaded / session.total_size * 100
        else:
            percent = 100.0 if session.status == SessionStatus.COMPLETED else 0.0

        return SessionSnapshot(
            status=session.status,
            total_files=session.total_files,
            completed_files=session.completed_files,
            total_size=session.total_size,
            uploaded_size=uploaded,
            percent=percent,
            elapsed=elapsed,
            throughput=throughput,
            eta_seconds=remaining,
            eta=format_eta(remaining),
        )

    def refresh(
        self,
        session: UploadSession | None,
        entries: Iterable[FileEntry],
    ) -> SessionSnapshot:
        """Compute a snapshot and record its uploaded size on the session."""
        snapshot = self.compute(session, entries)
        if session is not None and session.end_time is None:
            session.record_uploaded(snapshot.uploaded_size)
        return snapshot
