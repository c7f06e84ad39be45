"""
Speed test server endpoints and the shared HTTP session.

All HTTP work goes through a single ``aiohttp.ClientSession`` managed via
async-context-manager protocol (``async with SpeedcheckAPI(url) as api: ...``).
Every request carries a cache-defeat token (``?t=<epoch ms>``) so that no
intermediate cache can answer it from a stored copy.
"""
from __future__ import annotations

import asyncio
import itertools
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp

from .constants import (
    COMMON_HEADERS,
    DEFAULT_BASE_URL,
    DOWNLOAD_PATH,
    PING_PATH,
    UPLOAD_PATH,
)
from .errors import NetworkFailure, ServerStatusFailure

# Failures raised by aiohttp / the OS that mean "the network let us down".
TRANSPORT_ERRORS = (aiohttp.ClientError, OSError, asyncio.TimeoutError)

_token_seq = itertools.count()


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass
class Server:
    """A speed test server, addressed by its API base URL."""

    base_url: str = DEFAULT_BASE_URL

    # -- Constructors -------------------------------------------------------

    @classmethod
    def from_url(cls, url: str) -> Server:
        return cls(base_url=url.rstrip("/"))

    # -- Derived URLs -------------------------------------------------------

    @property
    def ping_url(self) -> str:
        return f"{self.base_url}{PING_PATH}"

    @property
    def upload_url(self) -> str:
        return f"{self.base_url}{UPLOAD_PATH}"

    def download_url(self, filename: str) -> str:
        return f"{self.base_url}{DOWNLOAD_PATH}/{filename}"

    # -- Serialisation ------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {"base_url": self.base_url}


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------

def cache_token() -> str:
    """Current time in milliseconds, suffixed so two calls never collide."""
    return f"{int(time.time() * 1000)}{next(_token_seq) % 1000:03d}"


def cache_params() -> Dict[str, str]:
    return {"t": cache_token()}


def check_status(resp: aiohttp.ClientResponse) -> None:
    """Raise ``ServerStatusFailure`` unless the status is 2xx."""
    if not 200 <= resp.status < 300:
        raise ServerStatusFailure(resp.status, resp.reason)


def network_failure(exc: BaseException) -> NetworkFailure:
    text = str(exc) or exc.__class__.__name__
    return NetworkFailure(text)


def create_session() -> aiohttp.ClientSession:
    """Session with no overall timeout; hangs are bounded by the transport."""
    timeout = aiohttp.ClientTimeout(total=None)
    return aiohttp.ClientSession(headers=COMMON_HEADERS, timeout=timeout)


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------

class SpeedcheckAPI:
    """Async context-manager owning the session used by one test run."""

    def __init__(self, url: str = DEFAULT_BASE_URL) -> None:
        self.server = Server.from_url(url)
        self._session: Optional[aiohttp.ClientSession] = None

    # -- Context manager ----------------------------------------------------

    async def __aenter__(self) -> SpeedcheckAPI:
        self._session = create_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._session:
            await self._session.close()
            self._session = None

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError(
                "SpeedcheckAPI must be used as an async context manager "
                "(async with SpeedcheckAPI(url) as api: ...)"
            )
        return self._session
