"""Byte sources for queued files."""

from __future__ import annotations

import asyncio
import mimetypes
from collections.abc import AsyncIterator
from dataclasses import dataclass
from pathlib import Path

DEFAULT_MIME_TYPE = "application/octet-stream"


def guess_mime_type(name: str) -> str:
    """Guess a MIME type from a file name."""
    mime_type, _ = mimetypes.guess_type(name)
    return mime_type or DEFAULT_MIME_TYPE


@dataclass(frozen=True)
class FileSource:
    """Immutable handle to the bytes of one selected file.

    Exactly one of ``path`` or ``data`` is set.
    """

    name: str
    size: int
    mime_type: str
    path: Path | None = None
    data: bytes | None = None

    def __post_init__(self) -> None:
        if (self.path is None) == (self.data is None):
            raise ValueError("FileSource needs exactly one of path or data")
        if self.size < 0:
            raise ValueError(f"Negative size for {self.name}: {self.size}")

    @classmethod
    def from_path(cls, path: Path, mime_type: str | None = None) -> "FileSource":
        """Create a source backed by a file on disk."""
        path = Path(path)
        return cls(
            name=path.name,
            size=path.stat().st_size,
            mime_type=mime_type or guess_mime_type(path.name),
            path=path,
        )

    @classmethod
    def from_bytes(
        cls,
        name: str,
        data: bytes,
        mime_type: str | None = None,
    ) -> "FileSource":
        """Create a source backed by in-memory bytes."""
        return cls(
            name=name,
            size=len(data),
            mime_type=mime_type or guess_mime_type(name),
            data=data,
        )

    @property
    def extension(self) -> str:
        """Lower-cased text after the final dot.

        A name without a dot yields the whole lower-cased name.
        """
        return self.name.rsplit(".", 1)[-1].lower()

    @property
    def _file(self) -> Path:
        if self.path is None:
            raise ValueError(f"{self.name} has no backing file")
        return self.path

    def read_bytes(self) -> bytes:
        """Read the full content."""
        if self.data is not None:
            return self.data
        return self._file.read_bytes()

    async def iter_chunks(self, chunk_size: int) -> AsyncIterator[bytes]:
        """Yield the content in chunks without blocking the event loop."""
        if self.data is not None:
            for offset in range(0, len(self.data), chunk_size):
                yield self.data[offset : offset + chunk_size]
            return

        with self._file.open("rb") as fh:
            while True:
                chunk = await asyncio.to_thread(fh.read, chunk_size)
                if not chunk:
                    break
                yield chunk
