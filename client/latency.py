"""
HTTP round-trip latency measurement.

One ``GET {base}/ping?t=<token>`` is timed from just before the request is
issued until the response status is known.  The body is never read.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

import aiohttp

from .api import TRANSPORT_ERRORS, Server, cache_params, check_status, network_failure


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class LatencyResult:
    """A single probe round-trip."""

    latency_ms: float = 0.0
    status: int = 0


# ---------------------------------------------------------------------------
# Prober
# ---------------------------------------------------------------------------

class LatencyProber:
    """Time one empty request/response exchange with the ping endpoint."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        server: Server,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.session = session
        self.server = server
        self.clock = clock

    async def measure(self) -> LatencyResult:
        start = self.clock()
        try:
            async with self.session.get(self.server.ping_url, params=cache_params()) as resp:
                elapsed = self.clock() - start
                check_status(resp)
                status = resp.status
        except TRANSPORT_ERRORS as exc:
            raise network_failure(exc) from exc

        return LatencyResult(latency_ms=elapsed * 1000, status=status)
