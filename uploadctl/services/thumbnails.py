"""Thumbnail generation for queued image files.

Decoding and encoding run in a worker thread so the event loop keeps
serving transfers. Failures raise ``ThumbnailError``; callers treat them
as non-fatal.
"""

from __future__ import annotations

import asyncio
import base64
import io
import logging

from PIL import Image

from uploadctl.core.exceptions import ThumbnailError
from uploadctl.models.source import FileSource
from uploadctl.uploaders.constants import THUMBNAIL_MAX_DIMENSION

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:image/png;base64,"


def scaled_dimensions(
    width: int,
    height: int,
    max_dimension: int = THUMBNAIL_MAX_DIMENSION,
) -> tuple[int, int]:
    """Fit an image into a ``max_dimension`` square, preserving aspect ratio.

    Only the larger side is compared against the limit. Images already
    within it keep their size; nothing is scaled up.

    Args:
        width: Source width in pixels.
        height: Source height in pixels.
        max_dimension: Largest allowed side.

    Returns:
        Tuple of (width, height), each at least 1.

    Raises:
        ValueError: If a dimension is not positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid image size: {width}x{height}")

    scaled_w, scaled_h = float(width), float(height)
    if width > height:
        if width > max_dimension:
            scaled_h = height * max_dimension / width
            scaled_w = max_dimension
    elif height > max_dimension:
        scaled_w = width * max_dimension / height
        scaled_h = max_dimension

    return max(1, int(scaled_w)), max(1, int(scaled_h))


def render_thumbnail(data: bytes, max_dimension: int = THUMBNAIL_MAX_DIMENSION) -> str:
    """Decode image bytes and return a PNG data URL of the scaled image."""
    with Image.open(io.BytesIO(data)) as img:
        img.load()
        size = scaled_dimensions(img.width, img.height, max_dimension)
        canvas = img.convert("RGBA").resize(size, Image.Resampling.LANCZOS)

    buffer = io.BytesIO()
    canvas.save(buffer, format="PNG")
    return DATA_URL_PREFIX + base64.b64encode(buffer.getvalue()).decode("ascii")


class ThumbnailProducer:
    """Produces inline previews for image sources."""

    def __init__(self, max_dimension: int = THUMBNAIL_MAX_DIMENSION) -> None:
        self.max_dimension = max_dimension

    def accepts(self, mime_type: str) -> bool:
        """Only ``image/*`` types get a thumbnail."""
        return mime_type.startswith("image/")

    async def produce(self, source: FileSource) -> str:
        """Render the thumbnail for ``source``.

        Raises:
            ThumbnailError: If the source is not an image or cannot be decoded.
        """
        if not self.accepts(source.mime_type):
            raise ThumbnailError(source.name, f"not an image ({source.mime_type})")

        try:
            return await asyncio.to_thread(self._render, source)
        except Exception as e:
            raise ThumbnailError(source.name, str(e)) from e

    def _render(self, source: FileSource) -> str:
        return render_thumbnail(source.read_bytes(), self.max_dimension)
