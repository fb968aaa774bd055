"""Transfer backends.

A backend moves the bytes of one file to the remote endpoint and reports
integer percentages through ``on_progress``. Two implementations:

- ``SimulatedBackend``: chunked transfer with network jitter, no I/O.
- ``HttpBackend``: streams the file body to an HTTP endpoint with httpx.
"""

from __future__ import annotations

import asyncio
import logging
import random
import string
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import datetime, timezone
from typing import Any, Protocol

import httpx

from uploadctl.models.progress import RemoteRecord
from uploadctl.models.source import FileSource
from uploadctl.uploaders.constants import (
    DEFAULT_REMOTE_BASE_URL,
    DEFAULT_TIMEOUT,
    FINALIZE_DELAY,
    HTTP_CHUNK_SIZE,
    STALL_DELAY,
    STALL_PROBABILITY,
    STEP_DELAY_MAX,
    STEP_DELAY_MIN,
    TRANSFER_STEPS,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


class TransferBackend(Protocol):
    """Interface every transfer backend implements."""

    async def upload_file(
        self,
        source: FileSource,
        *,
        on_progress: ProgressCallback,
    ) -> RemoteRecord:
        """Transfer one file, reporting percentages 0-100."""
        ...


def _remote_id(rng: random.Random) -> str:
    suffix = "".join(rng.choices(string.ascii_lowercase + string.digits, k=9))
    return f"upload_{int(time.time() * 1000)}_{suffix}"


# =============================================================================
# Simulated Backend
# =============================================================================


class SimulatedBackend:
    """Backend that fakes a chunked upload.

    Each of ``steps`` steps waits a random delay, reports progress, and
    occasionally stalls. ``failure_probability`` is checked once per step
    and raises ``ConnectionError`` to imitate a dropped connection.
    """

    def __init__(
        self,
        *,
        steps: int = TRANSFER_STEPS,
        step_delay: tuple[float, float] = (STEP_DELAY_MIN, STEP_DELAY_MAX),
        stall_probability: float = STALL_PROBABILITY,
        stall_delay: float = STALL_DELAY,
        finalize_delay: float = FINALIZE_DELAY,
        failure_probability: float = 0.0,
        base_url: str = DEFAULT_REMOTE_BASE_URL,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if steps < 1:
            raise ValueError(f"steps must be positive, got {steps}")
        self.steps = steps
        self.step_delay = step_delay
        self.stall_probability = stall_probability
        self.stall_delay = stall_delay
        self.finalize_delay = finalize_delay
        self.failure_probability = failure_probability
        self.base_url = base_url.rstrip("/")
        self._rng = rng or random.Random()
        self._sleep = sleep

    @classmethod
    def instant(cls, **kwargs: Any) -> SimulatedBackend:
        """Backend with every delay set to zero."""
        return cls(
            step_delay=(0.0, 0.0),
            stall_probability=0.0,
            stall_delay=0.0,
            finalize_delay=0.0,
            **kwargs,
        )

    async def upload_file(
        self,
        source: FileSource,
        *,
        on_progress: ProgressCallback,
    ) -> RemoteRecord:
        for step in range(1, self.steps + 1):
            await self._sleep(self._rng.uniform(*self.step_delay))

            if self._rng.random() < self.failure_probability:
                raise ConnectionError(f"Connection lost at {step}/{self.steps}")

            on_progress(round(step / self.steps * 100))

            if self._rng.random() < self.stall_probability:
                await self._sleep(self.stall_delay)

        await self._sleep(self.finalize_delay)

        return RemoteRecord(
            id=_remote_id(self._rng),
            filename=source.name,
            size=source.size,
            mime_type=source.mime_type,
            url=f"{self.base_url}/uploads/{source.name}",
            uploaded_at=datetime.now(timezone.utc),
        )


# =============================================================================
# HTTP Backend
# =============================================================================


class HttpBackend:
    """Backend that streams the file body to an HTTP endpoint.

    The endpoint receives the raw bytes as the request body with the file
    name as a ``filename`` query parameter, and answers with a JSON
    object holding ``id`` and ``url``. Missing ``filename``, ``size``,
    ``type`` and ``uploadedAt`` fields are filled in from the source.

    ``timeout`` bounds connecting and waiting for a pooled connection only;
    sending the body and reading the response are never cut off.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        chunk_size: int = HTTP_CHUNK_SIZE,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.timeouts = httpx.Timeout(None, connect=timeout, pool=timeout)
        self.verify_ssl = verify_ssl
        self.chunk_size = chunk_size
        self._client = client

    async def upload_file(
        self,
        source: FileSource,
        *,
        on_progress: ProgressCallback,
    ) -> RemoteRecord:
        if self._client is not None:
            return await self._send(self._client, source, on_progress)

        async with httpx.AsyncClient(timeout=self.timeouts, verify=self.verify_ssl) as client:
            return await self._send(client, source, on_progress)

    async def _send(
        self,
        client: httpx.AsyncClient,
        source: FileSource,
        on_progress: ProgressCallback,
    ) -> RemoteRecord:
        sent = 0

        async def body() -> AsyncIterator[bytes]:
            nonlocal sent
            async for chunk in source.iter_chunks(self.chunk_size):
                yield chunk
                sent += len(chunk)
                if source.size:
                    on_progress(min(100, sent * 100 // source.size))

        logger.debug("POST %s (%s, %d bytes)", self.url, source.name, source.size)
        resp = await client.post(
            self.url,
            params={"filename": source.name},
            headers={
                "Content-Type": source.mime_type,
                "Content-Length": str(source.size),
            },
            content=body(),
            timeout=self.timeouts,
        )
        resp.raise_for_status()
        on_progress(100)

        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected response body: {resp.text[:200]}")

        data.setdefault("filename", source.name)
        data.setdefault("size", source.size)
        data.setdefault("type", source.mime_type)
        data.setdefault("uploadedAt", datetime.now(timezone.utc).isoformat())
        return RemoteRecord.model_validate(data)
