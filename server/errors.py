"""Failures raised while serving a request."""

from __future__ import annotations


class ServerError(Exception):
    """Base class for request-handling failures."""


class StreamFailure(ServerError):
    """The inbound request body failed mid-transfer."""


class PayloadTooLarge(ServerError):
    """The inbound request body exceeded the configured ceiling."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Upload exceeds limit of {limit} bytes")
