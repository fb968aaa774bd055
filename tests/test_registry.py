"""Tests for uploadctl.services.registry."""

from __future__ import annotations

import pytest
from conftest import make_source

from uploadctl.core.exceptions import InvalidStatusTransitionError
from uploadctl.models.entry import EntryStatus, FileEntry
from uploadctl.services.registry import EntryRegistry


def _registry(*names: str) -> EntryRegistry:
    registry = EntryRegistry()
    for i, name in enumerate(names):
        registry.add(FileEntry.from_source(f"e{i}", make_source(name)))
    return registry


class TestEntryRegistryBasics:
    """Tests for adding and reading entries."""

    def test_keeps_insertion_order(self):
        registry = _registry("a.txt", "b.txt", "c.txt")

        assert [e.name for e in registry.entries()] == ["a.txt", "b.txt", "c.txt"]
        assert len(registry) == 3
        assert "e1" in registry

    def test_duplicate_id_rejected(self):
        registry = _registry("a.txt")

        with pytest.raises(ValueError, match="Duplicate"):
            registry.add(FileEntry.from_source("e0", make_source("other.txt")))

    def test_filter_by_status(self):
        registry = _registry("a.txt", "b.txt")
        registry.mark_uploading("e1")

        assert [e.id for e in registry.entries(EntryStatus.PENDING)] == ["e0"]
        assert registry.has_status(EntryStatus.UPLOADING)
        assert not registry.has_status(EntryStatus.COMPLETED)


class TestEntryRegistryUpdates:
    """Tests for merge-based updates."""

    def test_update_merges_fields(self):
        registry = _registry("a.png")
        registry.set_thumbnail("e0", "data:image/png;base64,AAAA")
        registry.mark_uploading("e0")
        registry.set_progress("e0", 40)

        entry = registry.get("e0")
        assert entry.thumbnail == "data:image/png;base64,AAAA"
        assert entry.status == EntryStatus.UPLOADING
        assert entry.progress == 40

    def test_records_are_replaced_not_mutated(self):
        registry = _registry("a.txt")
        before = registry.get("e0")

        registry.mark_uploading("e0")

        assert before.status == EntryStatus.PENDING
        assert registry.get("e0") is not before
        assert registry.get("e0").source is before.source

    def test_update_of_removed_entry_is_noop(self):
        registry = _registry("a.txt")
        registry.remove("e0")

        assert registry.mark_uploading("e0") is None
        assert registry.set_progress("e0", 50) is None
        assert len(registry) == 0

    def test_identity_fields_are_immutable(self):
        registry = _registry("a.txt")

        with pytest.raises(ValueError, match="name"):
            registry.update("e0", name="b.txt")

    def test_progress_ignored_unless_uploading(self):
        registry = _registry("a.txt")

        assert registry.set_progress("e0", 50) is None
        assert registry.get("e0").progress == 0

    def test_progress_never_decreases(self):
        registry = _registry("a.txt")
        registry.mark_uploading("e0")
        registry.set_progress("e0", 60)
        registry.set_progress("e0", 30)

        assert registry.get("e0").progress == 60

    def test_progress_100_reserved_for_completed(self):
        registry = _registry("a.txt")
        registry.mark_uploading("e0")
        registry.set_progress("e0", 100)

        assert registry.get("e0").progress == 99

        registry.mark_completed("e0", "https://files.test/a.txt")
        entry = registry.get("e0")
        assert entry.progress == 100
        assert entry.remote_url == "https://files.test/a.txt"

    def test_error_keeps_progress_below_100(self):
        registry = _registry("a.txt")
        registry.mark_uploading("e0")
        registry.set_progress("e0", 45)
        registry.mark_error("e0", "Upload failed: reset")

        entry = registry.get("e0")
        assert entry.status == EntryStatus.ERROR
        assert entry.error == "Upload failed: reset"
        assert entry.progress == 45

    @pytest.mark.parametrize(
        "start,target",
        [
            (EntryStatus.COMPLETED, EntryStatus.UPLOADING),
            (EntryStatus.COMPLETED, EntryStatus.ERROR),
            (EntryStatus.ERROR, EntryStatus.PENDING),
            (EntryStatus.PENDING, EntryStatus.COMPLETED),
        ],
    )
    def test_invalid_transitions(self, start: EntryStatus, target: EntryStatus):
        registry = _registry("a.txt")
        if start == EntryStatus.COMPLETED:
            registry.mark_uploading("e0")
            registry.mark_completed("e0")
        elif start == EntryStatus.ERROR:
            registry.mark_error("e0", "boom")

        with pytest.raises(InvalidStatusTransitionError):
            registry.update("e0", status=target)


class TestEntryRegistryRemoval:
    """Tests for removal operations."""

    def test_remove_where_preserves_order(self):
        registry = _registry("done.txt", "failed.txt", "waiting.txt")
        registry.mark_uploading("e0")
        registry.mark_completed("e0")
        registry.mark_error("e1", "boom")

        removed = registry.remove_where(lambda e: e.status == EntryStatus.COMPLETED)

        assert [e.name for e in removed] == ["done.txt"]
        assert [e.status for e in registry.entries()] == [EntryStatus.ERROR, EntryStatus.PENDING]

    def test_clear(self):
        registry = _registry("a.txt", "b.txt")

        assert registry.clear() == 2
        assert registry.entries() == []

    def test_remove_missing(self):
        assert _registry().remove("nope") is None
