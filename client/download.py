"""
Download speed test module.

A single GET for a fixed-size asset.  The timer runs from just before the
request is issued until the *entire* body has been read into memory, and
the rate is computed against the declared size.

When the received byte count differs from the declared size the rate is
still computed from the declared size; the discrepancy is reported as a
``SizeMismatch`` warning rather than silently corrected.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import aiohttp

from .api import TRANSPORT_ERRORS, Server, cache_params, check_status, network_failure
from .constants import DOWNLOAD_FILE, DOWNLOAD_FILE_SIZE
from .errors import SizeMismatch
from .stats import TransferSample

LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class DownloadResult:
    """Download test result."""

    speed_bps: float = 0.0
    bytes_expected: int = 0
    bytes_received: int = 0
    duration_ms: float = 0.0


# ---------------------------------------------------------------------------
# Meter
# ---------------------------------------------------------------------------

class DownloadMeter:
    """Time the full download of one asset of known size."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        server: Server,
        filename: str = DOWNLOAD_FILE,
        expected_size: int = DOWNLOAD_FILE_SIZE,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.session = session
        self.server = server
        self.filename = filename
        self.expected_size = expected_size
        self.clock = clock
        self.on_warning: Optional[Callable[[SizeMismatch], None]] = None

    async def measure(self) -> DownloadResult:
        url = self.server.download_url(self.filename)

        start = self.clock()
        try:
            async with self.session.get(url, params=cache_params()) as resp:
                check_status(resp)
                body = await resp.read()
        except TRANSPORT_ERRORS as exc:
            raise network_failure(exc) from exc
        end = self.clock()

        received = len(body)
        del body

        result = DownloadResult(bytes_expected=self.expected_size, bytes_received=received)
        if received != self.expected_size:
            self._warn(SizeMismatch(expected=self.expected_size, received=received))

        sample = TransferSample(start=start, end=end, byte_count=self.expected_size)
        result.speed_bps = sample.rate("Download")
        result.duration_ms = sample.elapsed_ms
        return result

    def _warn(self, mismatch: SizeMismatch) -> None:
        LOGGER.warning("Warning: %s", mismatch.message)
        if self.on_warning:
            self.on_warning(mismatch)
