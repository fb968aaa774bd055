"""Tests for uploadctl.uploaders.executor."""

from __future__ import annotations

import asyncio

import pytest
from conftest import ScriptedBackend, make_source

from uploadctl.core.exceptions import TransferError
from uploadctl.models.entry import FileEntry
from uploadctl.uploaders.executor import ProgressChannel, TransferExecutor


async def _drain(channel: ProgressChannel) -> list[int]:
    return [event.percent async for event in channel]


class TestProgressChannel:
    """Tests for ProgressChannel."""

    def test_delivers_in_order_until_closed(self):
        async def run():
            channel = ProgressChannel("e1")
            for p in (10, 20, 30):
                channel.publish(p)
            channel.close()
            return await _drain(channel)

        assert asyncio.run(run()) == [10, 20, 30]

    def test_drops_decreasing_and_clamps(self):
        async def run():
            channel = ProgressChannel("e1")
            for p in (-5, 40, 30, 40.4, 250):
                channel.publish(p)
            channel.close()
            return await _drain(channel)

        assert asyncio.run(run()) == [0, 40, 40, 100]

    def test_ignores_publish_after_close(self):
        async def run():
            channel = ProgressChannel("e1")
            channel.close()
            channel.publish(50)
            channel.close()
            return await _drain(channel), channel.last_percent, channel.closed

        assert asyncio.run(run()) == ([], 0, True)

    def test_events_carry_entry_id(self):
        async def run():
            channel = ProgressChannel("abc")
            channel.publish(5)
            channel.close()
            return [event async for event in channel]

        (event,) = asyncio.run(run())
        assert event.entry_id == "abc"


class TestTransferExecutor:
    """Tests for TransferExecutor."""

    def test_success_publishes_progress(self):
        backend = ScriptedBackend(steps=(50, 100))
        entry = FileEntry.from_source("e1", make_source("a.txt"))

        async def run():
            channel = ProgressChannel("e1")
            record = await TransferExecutor(backend).transfer(entry, channel)
            channel.close()
            return record, await _drain(channel)

        record, reports = asyncio.run(run())

        assert record.filename == "a.txt"
        assert reports == [50, 100]

    def test_backend_error_is_wrapped(self):
        backend = ScriptedBackend(failures={"a.txt": "socket closed"})
        entry = FileEntry.from_source("e1", make_source("a.txt"))

        with pytest.raises(TransferError) as exc_info:
            asyncio.run(TransferExecutor(backend).transfer(entry, ProgressChannel("e1")))

        err = exc_info.value
        assert str(err) == "Upload failed: socket closed"
        assert err.cause == "socket closed"
        assert err.filename == "a.txt"
        assert isinstance(err.__cause__, ConnectionError)

    def test_empty_message_uses_exception_type(self):
        class SilentBackend:
            async def upload_file(self, source, *, on_progress):
                raise TimeoutError()

        entry = FileEntry.from_source("e1", make_source("a.txt"))

        with pytest.raises(TransferError, match="Upload failed: TimeoutError"):
            asyncio.run(TransferExecutor(SilentBackend()).transfer(entry, ProgressChannel("e1")))

    def test_oversized_entry_rejected_before_transfer(self):
        backend = ScriptedBackend()
        entry = FileEntry.from_source("e1", make_source("big.bin", size=11))

        with pytest.raises(TransferError, match="File size exceeds"):
            asyncio.run(
                TransferExecutor(backend, max_file_size=10).transfer(entry, ProgressChannel("e1"))
            )
        assert backend.calls == []
