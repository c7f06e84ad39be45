"""
Typed failures raised by the meters.

Every fatal failure is a ``SpeedtestError``; the orchestrator fails the
current phase and the run on any of them.  ``SizeMismatch`` is not an
exception: it is a non-fatal warning record attached to a result.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class SpeedtestError(Exception):
    """Base class for all measurement failures."""

    kind = "error"


class NetworkFailure(SpeedtestError):
    """Connection refused, DNS failure, transport reset."""

    kind = "network"


class ServerStatusFailure(SpeedtestError):
    """The server answered with a non-success status code."""

    kind = "status"

    def __init__(self, status: int, reason: Optional[str] = None) -> None:
        self.status = status
        self.reason = reason
        super().__init__(f"Server error: {status}")


class DurationInvalid(SpeedtestError):
    """Elapsed time was zero or negative (timer granularity underflow)."""

    kind = "duration"


class RunInProgressError(RuntimeError):
    """``run()`` was called while a previous run was still in flight."""


@dataclass
class SizeMismatch:
    """Downloaded byte count differs from the declared payload size."""

    expected: int
    received: int

    @property
    def message(self) -> str:
        return (
            f"Downloaded size ({self.received}) doesn't match expected size "
            f"({self.expected}). Speed might be inaccurate."
        )

    def __str__(self) -> str:
        return self.message
