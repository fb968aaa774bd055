"""Transfer executor: drives one entry's upload against a backend.

Progress is published on a per-entry ``ProgressChannel`` that the
orchestrator drains into the registry. This is an internal implementation
detail. Use ``UploadOrchestrator`` from ``uploadctl.services.orchestrator``
as the public API.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from uploadctl.core.exceptions import TransferError
from uploadctl.models.entry import FileEntry
from uploadctl.models.progress import RemoteRecord, TransferProgress
from uploadctl.uploaders.backends import TransferBackend
from uploadctl.uploaders.constants import MAX_FILE_SIZE

logger = logging.getLogger(__name__)


class ProgressChannel:
    """Ordered stream of progress events for one entry.

    Percentages are clamped to 0-100 and never go backwards; a report lower
    than the previous one is dropped. Iteration ends after ``close()``
    once every queued event has been delivered.
    """

    def __init__(self, entry_id: str) -> None:
        self.entry_id = entry_id
        self._queue: asyncio.Queue[TransferProgress | None] = asyncio.Queue()
        self._last = 0
        self._closed = False

    @property
    def last_percent(self) -> int:
        return self._last

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, percent: float) -> None:
        """Queue a progress report. Ignored after close."""
        if self._closed:
            return
        value = max(0, min(100, round(percent)))
        if value < self._last:
            return
        self._last = value
        self._queue.put_nowait(TransferProgress(self.entry_id, value))

    def close(self) -> None:
        """Mark the end of the stream."""
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)

    async def __aiter__(self) -> AsyncIterator[TransferProgress]:
        while True:
            event = await self._queue.get()
            if event is None:
                return
            yield event


class TransferExecutor:
    """Transfers single entries through a backend.

    Every failure is raised as a ``TransferError`` whose message is
    ``"Upload failed: <cause>"``; the original exception is chained.
    """

    def __init__(
        self,
        backend: TransferBackend,
        *,
        max_file_size: int = MAX_FILE_SIZE,
    ) -> None:
        self.backend = backend
        self.max_file_size = max_file_size

    async def transfer(self, entry: FileEntry, channel: ProgressChannel) -> RemoteRecord:
        """Upload one entry.

        Args:
            entry: Entry to transfer; its source is read, never modified.
            channel: Channel receiving the entry's progress reports.

        Returns:
            RemoteRecord from the backend.

        Raises:
            TransferError: If the entry is oversized or the backend fails.
        """
        if entry.size > self.max_file_size:
            limit_mb = self.max_file_size // (1024 * 1024)
            raise TransferError(f"File size exceeds {limit_mb}MB limit", entry.name)

        logger.debug("Transferring %s (%d bytes)", entry.name, entry.size)
        try:
            record = await self.backend.upload_file(entry.source, on_progress=channel.publish)
        except TransferError:
            raise
        except Exception as e:
            logger.warning("Transfer of %s failed: %s", entry.name, e)
            raise TransferError(str(e) or type(e).__name__, entry.name) from e

        logger.debug("Transferred %s -> %s", entry.name, record.url)
        return record
