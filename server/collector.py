"""
Incremental consumption of an upload request body.

The body arrives as an async iterator of chunks in arrival order, followed
by exactly one terminal event: normal end of stream, or a transport error.
Only the byte count is retained -- chunk contents are dropped as soon as
they are counted, so nothing outlives the request.
"""
from __future__ import annotations

import logging
from typing import AsyncIterable

import aiohttp
from aiohttp.http_exceptions import HttpProcessingError

from .config import UPLOAD_LIMIT
from .errors import PayloadTooLarge, StreamFailure

LOGGER = logging.getLogger(__name__)

# What a request payload raises when the client vanishes or sends garbage.
STREAM_ERRORS = (aiohttp.ClientPayloadError, HttpProcessingError, EOFError, OSError)


class UploadCollector:
    """Count request-body bytes until end of stream, enforcing a ceiling."""

    def __init__(self, limit: int = UPLOAD_LIMIT) -> None:
        self.limit = limit
        self.bytes_received = 0
        self.chunk_count = 0
        self.finished = False

    def feed(self, chunk: bytes) -> None:
        size = len(chunk)
        self.bytes_received += size
        self.chunk_count += 1
        LOGGER.debug("Received data chunk of size: %d", size)
        if self.limit and self.bytes_received > self.limit:
            raise PayloadTooLarge(self.limit)

    async def consume(self, chunks: AsyncIterable[bytes]) -> int:
        """
        Drain *chunks* to the end and return the total byte count.

        Raises ``StreamFailure`` on a transport error and ``PayloadTooLarge``
        as soon as the ceiling is crossed.  ``finished`` is only set once the
        end-of-stream signal has been seen.
        """
        try:
            async for chunk in chunks:
                self.feed(chunk)
        except STREAM_ERRORS as exc:
            LOGGER.error("Request stream error: %s", exc)
            raise StreamFailure(str(exc) or exc.__class__.__name__) from exc

        self.finished = True
        LOGGER.info("Total received upload size: %d bytes", self.bytes_received)
        return self.bytes_received
