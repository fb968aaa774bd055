"""Entry registry: the single source of truth for per-file state."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any

from uploadctl.core.exceptions import InvalidStatusTransitionError
from uploadctl.models.entry import EntryStatus, FileEntry

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = frozenset({"id", "name", "size", "mime_type", "source", "created_at"})


class EntryRegistry:
    """Ordered mapping of entry ID to ``FileEntry``.

    Every mutation is a merge: the latest stored record is copied with only
    the changed fields replaced, so updates coming from different transfers
    never overwrite each other. Mutations addressed to an ID that is no
    longer present are ignored.

    Progress invariants enforced here:
    - progress is 100 exactly when the status is ``completed``
    - progress of an uploading entry never decreases
    """

    def __init__(self) -> None:
        self._entries: dict[str, FileEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._entries

    def __iter__(self) -> Iterator[FileEntry]:
        return iter(list(self._entries.values()))

    def get(self, entry_id: str) -> FileEntry | None:
        return self._entries.get(entry_id)

    def entries(self, status: EntryStatus | None = None) -> list[FileEntry]:
        """Return entries in queue order, optionally filtered by status."""
        if status is None:
            return list(self._entries.values())
        return [e for e in self._entries.values() if e.status == status]

    def has_status(self, status: EntryStatus) -> bool:
        return any(e.status == status for e in self._entries.values())

    # =========================================================================
    # Mutations
    # =========================================================================

    def add(self, entry: FileEntry) -> None:
        """Append an entry to the end of the queue.

        Raises:
            ValueError: If an entry with the same ID is already queued.
        """
        if entry.id in self._entries:
            raise ValueError(f"Duplicate entry ID: {entry.id}")
        self._entries[entry.id] = entry

    def update(self, entry_id: str, **changes: Any) -> FileEntry | None:
        """Merge ``changes`` into the latest record of ``entry_id``.

        Returns:
            The new record, or None if the entry is no longer queued.

        Raises:
            InvalidStatusTransitionError: If the status change is not allowed.
            ValueError: If an identity field is being changed.
        """
        current = self._entries.get(entry_id)
        if current is None:
            logger.debug("Ignoring update for removed entry %s", entry_id)
            return None

        frozen = _IMMUTABLE_FIELDS.intersection(changes)
        if frozen:
            raise ValueError(f"Cannot change {', '.join(sorted(frozen))} of entry {entry_id}")

        status = EntryStatus(changes.get("status", current.status))
        if not current.status.can_transition_to(status):
            raise InvalidStatusTransitionError(entry_id, current.status.value, status.value)

        progress = int(changes.get("progress", current.progress))
        if status == EntryStatus.COMPLETED:
            progress = 100
        else:
            # 100 is reserved for completed entries
            progress = max(0, min(progress, 99))
            if status == EntryStatus.UPLOADING:
                progress = max(progress, current.progress)

        changes["status"] = status
        changes["progress"] = progress
        updated = current.model_copy(update=changes)
        self._entries[entry_id] = updated
        return updated

    def set_progress(self, entry_id: str, percent: int) -> FileEntry | None:
        """Record transfer progress. Ignored unless the entry is uploading."""
        current = self._entries.get(entry_id)
        if current is None or current.status != EntryStatus.UPLOADING:
            return None
        return self.update(entry_id, progress=percent)

    def mark_uploading(self, entry_id: str) -> FileEntry | None:
        return self.update(entry_id, status=EntryStatus.UPLOADING)

    def mark_completed(self, entry_id: str, remote_url: str | None = None) -> FileEntry | None:
        return self.update(entry_id, status=EntryStatus.COMPLETED, remote_url=remote_url)

    def mark_error(self, entry_id: str, message: str) -> FileEntry | None:
        return self.update(entry_id, status=EntryStatus.ERROR, error=message)

    def set_thumbnail(self, entry_id: str, thumbnail: str) -> FileEntry | None:
        return self.update(entry_id, thumbnail=thumbnail)

    def remove(self, entry_id: str) -> FileEntry | None:
        """Remove an entry whatever its status."""
        return self._entries.pop(entry_id, None)

    def remove_where(self, predicate: Callable[[FileEntry], bool]) -> list[FileEntry]:
        """Remove matching entries, keeping the order of the rest."""
        removed = [e for e in self._entries.values() if predicate(e)]
        for entry in removed:
            del self._entries[entry.id]
        return removed

    def clear(self) -> int:
        """Remove every entry. Returns how many were removed."""
        count = len(self._entries)
        self._entries.clear()
        return count
