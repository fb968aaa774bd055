"""Upload orchestrator: queue management and concurrent upload sessions.

The orchestrator owns the entry registry and the current session. It
validates and queues files, dispatches one transfer per pending entry,
applies every progress report to the registry, and keeps an aggregate
``SessionSnapshot`` up to date. Presentation code reads state through the
public properties and subscribes to ``StateChange`` events.

Everything runs on one asyncio event loop; transfers are interleaved
tasks. Registry mutations never await, so each one is applied atomically.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from uploadctl.core.exceptions import (
    NoPendingFilesError,
    SessionBusyError,
    ThumbnailError,
    TransferError,
)
from uploadctl.core.logging import LogContext
from uploadctl.models.entry import EntryStatus, FileEntry
from uploadctl.models.progress import RemoteRecord, UploadSummary
from uploadctl.models.session import SessionSnapshot, SessionStatus, UploadSession
from uploadctl.models.source import FileSource
from uploadctl.services.aggregator import SessionAggregator
from uploadctl.services.notifications import LoggingNotifier, NotificationKind, Notifier
from uploadctl.services.registry import EntryRegistry
from uploadctl.services.thumbnails import ThumbnailProducer
from uploadctl.uploaders.backends import TransferBackend
from uploadctl.uploaders.common import normalize_extensions, validate_file
from uploadctl.uploaders.constants import (
    DEFAULT_MAX_CONCURRENCY,
    MAX_FILE_SIZE,
    SESSION_OBSERVATION_DELAY,
)
from uploadctl.uploaders.executor import ProgressChannel, TransferExecutor

logger = logging.getLogger(__name__)


# =============================================================================
# State Change Events
# =============================================================================


class ChangeKind(str, Enum):
    """What changed in the orchestrator's state."""

    ENTRY_ADDED = "entry_added"
    ENTRY_UPDATED = "entry_updated"
    ENTRY_REMOVED = "entry_removed"
    QUEUE_CLEARED = "queue_cleared"
    SESSION_UPDATED = "session_updated"


@dataclass(frozen=True)
class StateChange:
    """Event delivered to listeners after every state change."""

    kind: ChangeKind
    snapshot: SessionSnapshot
    entry_id: str | None = None


Listener = Callable[[StateChange], None]


def _new_entry_id() -> str:
    return f"file_{uuid.uuid4().hex}"


# =============================================================================
# Orchestrator
# =============================================================================


class UploadOrchestrator:
    """Owns the upload queue and runs upload sessions.

    Args:
        backend: Backend every transfer goes through.
        notifier: Receives user-facing notifications (logged by default).
        thumbnails: Producer for image previews; None disables previews.
        aggregator: Session aggregator (injectable clock for tests).
        max_concurrency: Limit on simultaneous transfers; None dispatches
            every pending entry at once.
        observation_delay: Seconds a completed session stays visible.
        max_file_size: Largest accepted file in bytes.
        id_factory: Generates entry IDs.
    """

    def __init__(
        self,
        backend: TransferBackend,
        *,
        notifier: Notifier | None = None,
        thumbnails: ThumbnailProducer | None = None,
        aggregator: SessionAggregator | None = None,
        max_concurrency: int | None = DEFAULT_MAX_CONCURRENCY,
        observation_delay: float = SESSION_OBSERVATION_DELAY,
        max_file_size: int = MAX_FILE_SIZE,
        id_factory: Callable[[], str] = _new_entry_id,
    ) -> None:
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError(f"max_concurrency must be positive, got {max_concurrency}")

        self.max_concurrency = max_concurrency
        self.observation_delay = observation_delay
        self.max_file_size = max_file_size

        self._executor = TransferExecutor(backend, max_file_size=max_file_size)
        self._notifier = notifier or LoggingNotifier()
        self._thumbnails = thumbnails
        self._aggregator = aggregator or SessionAggregator()
        self._new_id = id_factory

        self._registry = EntryRegistry()
        self._session: UploadSession | None = None
        self._snapshot = SessionSnapshot.empty()
        self._busy = False
        self._expiry: asyncio.TimerHandle | None = None
        self._thumbnail_tasks: dict[str, asyncio.Task[None]] = {}
        self._history: list[RemoteRecord] = []
        self._listeners: list[Listener] = []

    # =========================================================================
    # State Access
    # =========================================================================

    @property
    def entries(self) -> list[FileEntry]:
        """All queued entries in selection order."""
        return self._registry.entries()

    def get_entry(self, entry_id: str) -> FileEntry | None:
        return self._registry.get(entry_id)

    @property
    def session(self) -> UploadSession | None:
        """Copy of the current session, or None."""
        return self._session.model_copy() if self._session else None

    @property
    def session_status(self) -> SessionStatus:
        return self._session.status if self._session else SessionStatus.NONE

    @property
    def snapshot(self) -> SessionSnapshot:
        """Latest aggregate view of the session."""
        return self._snapshot

    @property
    def is_busy(self) -> bool:
        """True while transfers of a session are still running."""
        return self._busy

    def upload_history(self) -> list[RemoteRecord]:
        """Records of every successful transfer, newest first."""
        return list(reversed(self._history))

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # =========================================================================
    # Queue Management
    # =========================================================================

    async def add_files(
        self,
        sources: Iterable[FileSource],
        allowed_extensions: Iterable[str] | None = None,
    ) -> list[FileEntry]:
        """Validate files and append the accepted ones to the queue.

        Rejected files produce one error notification each and are skipped.
        Image entries are queued immediately; their thumbnails attach later.

        Args:
            sources: Selected files, in selection order.
            allowed_extensions: Extension allow-list; empty accepts all.

        Returns:
            The entries that were queued.
        """
        allowed = normalize_extensions(allowed_extensions)
        added: list[FileEntry] = []

        for source in sources:
            result = validate_file(source, allowed, max_size=self.max_file_size)
            if not result.accepted:
                logger.info("Rejected %s: %s", source.name, result.reason)
                self._notify(NotificationKind.ERROR, result.reason)
                continue

            entry = FileEntry.from_source(self._new_id(), source)
            self._registry.add(entry)
            added.append(entry)
            self._emit(ChangeKind.ENTRY_ADDED, entry.id)

            if self._thumbnails is not None and self._thumbnails.accepts(entry.mime_type):
                self._schedule_thumbnail(self._thumbnails, entry)

        if added:
            logger.info("Queued %d file(s)", len(added))
            self._notify(
                NotificationKind.SUCCESS, f"{len(added)} file(s) added to upload queue"
            )
        return added

    def remove_file(self, entry_id: str) -> bool:
        """Remove an entry whatever its status.

        A running transfer for the entry is not stopped; its later updates
        are ignored by the registry.
        """
        removed = self._registry.remove(entry_id)
        if removed is None:
            return False

        task = self._thumbnail_tasks.pop(entry_id, None)
        if task is not None:
            task.cancel()

        logger.info("Removed %s (%s)", removed.name, removed.status.value)
        self._notify(NotificationKind.INFO, "File removed from upload queue")
        self._recompute()
        self._emit(ChangeKind.ENTRY_REMOVED, entry_id)
        return True

    def clear_completed(self) -> int:
        """Remove every completed entry. Returns how many were removed."""
        removed = self._registry.remove_where(lambda e: e.status == EntryStatus.COMPLETED)
        logger.info("Cleared %d completed file(s)", len(removed))
        self._notify(NotificationKind.SUCCESS, "Completed files cleared")
        self._recompute()
        self._emit(ChangeKind.QUEUE_CLEARED)
        return len(removed)

    def reset_all(self) -> bool:
        """Empty the queue and discard the session.

        Does nothing while transfers are running.

        Returns:
            True if the queue was reset.
        """
        if self._busy:
            logger.info("Reset ignored: upload in progress")
            return False

        self._cancel_expiry()
        self._cancel_thumbnails()
        self._registry.clear()
        self._session = None
        self._snapshot = SessionSnapshot.empty()
        self._notify(NotificationKind.SUCCESS, "Upload queue cleared")
        self._emit(ChangeKind.QUEUE_CLEARED)
        return True

    # =========================================================================
    # Upload Session
    # =========================================================================

    async def start_upload(self) -> UploadSummary:
        """Upload every pending entry concurrently.

        The set of pending entries is fixed when the call starts. The
        session turns to ``error`` as soon as one transfer fails; the other
        transfers keep running and the call returns once all have finished.

        Returns:
            UploadSummary of the session.

        Raises:
            SessionBusyError: If a session is still transferring.
            NoPendingFilesError: If no entry is pending.
        """
        if self._busy:
            raise SessionBusyError()

        pending = self._registry.entries(EntryStatus.PENDING)
        if not pending:
            self._notify(NotificationKind.WARNING, "No files to upload")
            raise NoPendingFilesError()

        self._cancel_expiry()
        session = UploadSession(
            entry_ids=tuple(e.id for e in pending),
            total_files=len(pending),
            total_size=sum(e.size for e in pending),
            start_time=self._aggregator.clock(),
        )
        self._session = session
        self._busy = True
        self._recompute()
        self._emit(ChangeKind.SESSION_UPDATED)

        limiter = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None
        try:
            with LogContext(
                "upload session",
                logger,
                files=session.total_files,
                bytes=session.total_size,
                concurrency=self.max_concurrency or "unbounded",
            ):
                results = await asyncio.gather(
                    *(self._run_transfer(session, entry, limiter) for entry in pending),
                    return_exceptions=True,
                )
        finally:
            self._busy = False
            session.end_time = self._aggregator.clock()

        records: list[RemoteRecord] = []
        errors: list[str] = []
        for entry, result in zip(pending, results, strict=True):
            if isinstance(result, TransferError):
                errors.append(f"{entry.name}: {result.message}")
            elif isinstance(result, BaseException):
                raise result
            else:
                records.append(result)

        if errors:
            logger.warning("Upload completed with %d failures", len(errors))
        else:
            session.uploaded_size = float(session.total_size)
            session.status = SessionStatus.COMPLETED
            self._notify(NotificationKind.SUCCESS, "All files uploaded successfully!")
            self._schedule_expiry(session)

        self._recompute()
        self._emit(ChangeKind.SESSION_UPDATED)

        return UploadSummary(
            success=not errors,
            total=session.total_files,
            succeeded=len(records),
            failed=len(errors),
            duration=session.end_time - session.start_time,
            errors=errors,
            total_size=session.total_size,
            uploaded_size=session.uploaded_size,
            records=records,
        )

    async def _run_transfer(
        self,
        session: UploadSession,
        entry: FileEntry,
        limiter: asyncio.Semaphore | None,
    ) -> RemoteRecord:
        if limiter is None:
            return await self._transfer_entry(session, entry)
        async with limiter:
            return await self._transfer_entry(session, entry)

    async def _transfer_entry(self, session: UploadSession, entry: FileEntry) -> RemoteRecord:
        if self._registry.mark_uploading(entry.id) is not None:
            self._emit(ChangeKind.ENTRY_UPDATED, entry.id)

        channel = ProgressChannel(entry.id)
        consumer = asyncio.create_task(self._consume_progress(channel))
        error: TransferError | None = None
        try:
            record = await self._executor.transfer(entry, channel)
        except TransferError as e:
            error = e
        finally:
            channel.close()
            await consumer

        if error is not None:
            self._registry.mark_error(entry.id, error.message)
            self._fail_session(session)
            self._recompute()
            self._emit(ChangeKind.ENTRY_UPDATED, entry.id)
            raise error

        self._registry.mark_completed(entry.id, record.url)
        session.record_completed_file()
        self._history.append(record)
        self._recompute()
        self._emit(ChangeKind.ENTRY_UPDATED, entry.id)
        return record

    async def _consume_progress(self, channel: ProgressChannel) -> None:
        async for event in channel:
            if self._registry.set_progress(event.entry_id, event.percent) is not None:
                self._recompute()
                self._emit(ChangeKind.ENTRY_UPDATED, event.entry_id)

    def _fail_session(self, session: UploadSession) -> None:
        if session.status != SessionStatus.UPLOADING:
            return
        session.status = SessionStatus.ERROR
        logger.warning("Upload session failed")
        self._notify(NotificationKind.ERROR, "Upload failed")

    # =========================================================================
    # Session Expiry
    # =========================================================================

    def _schedule_expiry(self, session: UploadSession) -> None:
        self._cancel_expiry()
        loop = asyncio.get_running_loop()
        self._expiry = loop.call_later(self.observation_delay, self._expire_session, session)

    def _expire_session(self, session: UploadSession) -> None:
        self._expiry = None
        if self._session is not session or session.status != SessionStatus.COMPLETED:
            return
        self._session = None
        self._snapshot = SessionSnapshot.empty()
        self._emit(ChangeKind.SESSION_UPDATED)

    def _cancel_expiry(self) -> None:
        if self._expiry is not None:
            self._expiry.cancel()
            self._expiry = None

    # =========================================================================
    # Thumbnails
    # =========================================================================

    def _schedule_thumbnail(self, producer: ThumbnailProducer, entry: FileEntry) -> None:
        task = asyncio.create_task(
            self._attach_thumbnail(producer, entry.id, entry.source),
            name=f"thumbnail-{entry.id}",
        )
        self._thumbnail_tasks[entry.id] = task
        task.add_done_callback(lambda _: self._thumbnail_tasks.pop(entry.id, None))

    async def _attach_thumbnail(
        self, producer: ThumbnailProducer, entry_id: str, source: FileSource
    ) -> None:
        try:
            thumbnail = await producer.produce(source)
        except ThumbnailError as e:
            logger.warning("%s", e)
            return

        if self._registry.set_thumbnail(entry_id, thumbnail) is not None:
            self._emit(ChangeKind.ENTRY_UPDATED, entry_id)

    async def wait_for_thumbnails(self) -> None:
        """Wait until every scheduled thumbnail has attached or failed."""
        tasks = list(self._thumbnail_tasks.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _cancel_thumbnails(self) -> None:
        for task in self._thumbnail_tasks.values():
            task.cancel()
        self._thumbnail_tasks.clear()

    async def aclose(self) -> None:
        """Cancel the expiry timer and outstanding thumbnail work."""
        self._cancel_expiry()
        tasks = list(self._thumbnail_tasks.values())
        self._cancel_thumbnails()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # =========================================================================
    # Internals
    # =========================================================================

    def _recompute(self) -> SessionSnapshot:
        self._snapshot = self._aggregator.refresh(self._session, self._registry)
        return self._snapshot

    def _notify(self, kind: NotificationKind, message: str) -> None:
        self._notifier.notify(kind, message)

    def _emit(self, kind: ChangeKind, entry_id: str | None = None) -> None:
        change = StateChange(kind=kind, snapshot=self._snapshot, entry_id=entry_id)
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("State listener failed on %s", kind.value)
