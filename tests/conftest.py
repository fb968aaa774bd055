"""Pytest configuration and fixtures for uploadctl tests."""

from __future__ import annotations

import asyncio
import io
import struct
import tempfile
import zlib
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, Optional

import pytest
from PIL import Image

from uploadctl.models.progress import RemoteRecord
from uploadctl.models.source import FileSource
from uploadctl.services.notifications import NotificationKind
from uploadctl.uploaders.backends import ProgressCallback

# =============================================================================
# Test Doubles
# =============================================================================


class ScriptedBackend:
    """Backend that reports a fixed progress sequence for every file.

    Args:
        steps: Percentages reported in order.
        failures: File name -> error message raised after the first step.
        holds: File name -> event awaited after the first step.
    """

    def __init__(
        self,
        steps: tuple[int, ...] = (25, 50, 75, 100),
        failures: Optional[dict[str, str]] = None,
        holds: Optional[dict[str, asyncio.Event]] = None,
    ) -> None:
        self.steps = steps
        self.failures = failures or {}
        self.holds = holds or {}
        self.calls: list[str] = []
        self.active = 0
        self.max_active = 0

    async def upload_file(self, source: FileSource, *, on_progress: ProgressCallback) -> RemoteRecord:
        self.calls.append(source.name)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            for i, percent in enumerate(self.steps):
                await asyncio.sleep(0)
                on_progress(percent)
                if i == 0:
                    if source.name in self.holds:
                        await self.holds[source.name].wait()
                    if source.name in self.failures:
                        raise ConnectionError(self.failures[source.name])
            return RemoteRecord(
                id=f"remote_{source.name}",
                filename=source.name,
                size=source.size,
                mime_type=source.mime_type,
                url=f"https://files.test/uploads/{source.name}",
                uploaded_at=datetime.now(timezone.utc),
            )
        finally:
            self.active -= 1


class RecordingNotifier:
    """Notifier that keeps every notification."""

    def __init__(self) -> None:
        self.events: list[tuple[NotificationKind, str]] = []

    def notify(self, kind: NotificationKind, message: str) -> None:
        self.events.append((kind, message))

    def messages(self, kind: Optional[NotificationKind] = None) -> list[str]:
        return [m for k, m in self.events if kind is None or k == kind]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_source(name: str, size: int = 1024, mime_type: Optional[str] = None) -> FileSource:
    """In-memory source of ``size`` zero bytes."""
    return FileSource.from_bytes(name, b"\0" * size, mime_type)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def png_bytes() -> bytes:
    """A 400x200 PNG image."""
    buf = io.BytesIO()
    Image.new("RGB", (400, 200), color=(200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def broken_chunk_png() -> bytes:
    """A PNG that opens but fails to decode.

    The image data is split over two chunks and the second chunk carries an
    invalid type, so the error only surfaces while pixels are loaded.
    """
    buf = io.BytesIO()
    Image.effect_noise((200, 200), 64).save(buf, format="PNG")
    data = buf.getvalue()

    start = data.index(b"IDAT") - 4
    (length,) = struct.unpack(">I", data[start : start + 4])
    payload = data[start + 8 : start + 8 + length]
    head, tail = data[:start], data[start + 12 + length :]

    def chunk(kind: bytes, body: bytes) -> bytes:
        crc = zlib.crc32(kind + body) & 0xFFFFFFFF
        return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", crc)

    half = len(payload) // 2
    return head + chunk(b"IDAT", payload[:half]) + chunk(b"\x00\x01!!", payload[half:]) + tail


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep uploadctl environment overrides out of every test."""
    for name in (
        "UPLOADCTL_URL",
        "UPLOADCTL_PROFILE",
        "UPLOADCTL_VERIFY_SSL",
        "UPLOADCTL_TIMEOUT",
        "UPLOADCTL_MAX_CONCURRENCY",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
default_profile: staging
output_format: table
max_concurrency: 3
observation_delay: 1.5

filters:
  archives: [zip, tar, gz]

profiles:
  staging:
    backend: http
    url: https://staging.example.org/upload
    verify_ssl: false
    timeout: 10

  local:
    backend: simulated
"""
