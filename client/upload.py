"""
Upload speed test module.

Generates ``size`` random bytes, POSTs them to the upload collector and
stops the timer only once the acknowledgment body has been fully drained.
Stopping when the last request byte leaves the socket would only measure
send-buffer time, not the server having received everything.
"""
import os
import time
from dataclasses import dataclass
from typing import Callable

import aiohttp

from .api import TRANSPORT_ERRORS, Server, cache_params, check_status, network_failure
from .constants import UPLOAD_DATA_SIZE
from .stats import TransferSample


@dataclass
class UploadResult:
    """Upload test result."""
    speed_bps: float = 0.0
    bytes_total: int = 0
    duration_ms: float = 0.0


class UploadMeter:
    """
    Upload speed meter using a single HTTP POST of a pre-generated payload.
    """

    HEADERS = {
        "Content-Type": "application/octet-stream",
    }

    def __init__(
        self,
        session: aiohttp.ClientSession,
        server: Server,
        size: int = UPLOAD_DATA_SIZE,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.session = session
        self.server = server
        self.size = size
        self.clock = clock

    def make_payload(self) -> bytes:
        """Random content; only the length matters."""
        return os.urandom(self.size)

    async def measure(self) -> UploadResult:
        """Perform upload speed test."""
        # Payload generation stays outside the timed window
        data = self.make_payload()

        start = self.clock()
        try:
            async with self.session.post(
                self.server.upload_url,
                params=cache_params(),
                data=data,
                headers=self.HEADERS,
            ) as resp:
                check_status(resp)
                # Wait for the acknowledgment before stopping the timer
                await resp.read()
        except TRANSPORT_ERRORS as exc:
            raise network_failure(exc) from exc
        end = self.clock()

        sample = TransferSample(start=start, end=end, byte_count=len(data))
        return UploadResult(
            speed_bps=sample.rate("Upload"),
            bytes_total=sample.byte_count,
            duration_ms=sample.elapsed_ms,
        )
