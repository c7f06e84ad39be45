"""
Measurement arithmetic and unit conversion.

Pure functions and lightweight dataclasses -- no I/O, no side effects.
Everything here is deterministic and easy to unit-test.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .constants import (
    BITS_PER_BYTE,
    BITS_PER_MEBIBIT,
    EMPTY_RESULT,
    SPEED_DECIMALS,
)
from .errors import DurationInvalid


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass
class TransferSample:
    """Timing of one complete transfer of ``byte_count`` bytes."""

    start: float
    end: float
    byte_count: int

    @property
    def elapsed_seconds(self) -> float:
        return self.end - self.start

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed_seconds * 1000

    def rate(self, label: str = "Transfer") -> float:
        """Bytes per second.  Raises ``DurationInvalid`` instead of dividing by <= 0."""
        seconds = self.elapsed_seconds
        if seconds <= 0:
            raise DurationInvalid(f"{label} duration invalid.")
        return self.byte_count / seconds


# ---------------------------------------------------------------------------
# Pure helper functions
# ---------------------------------------------------------------------------

def bytes_to_mbps(speed_bps: float) -> float:
    """Bytes/second to mebibits/second (x8, then / 1,048,576)."""
    return (speed_bps * BITS_PER_BYTE) / BITS_PER_MEBIBIT


def _to_fixed(value: float, places: int) -> str:
    # Ties round away from zero on the exact binary value, so 0.125 -> "0.13"
    # and 0.5 -> "1" rather than Python's round-half-even.
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def _is_missing(value: Optional[float]) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_speed(speed_bps: Optional[float]) -> str:
    """Bytes/second rendered as megabits/second with two decimals."""
    if _is_missing(speed_bps):
        return EMPTY_RESULT
    return _to_fixed(bytes_to_mbps(speed_bps), SPEED_DECIMALS)


def format_latency(latency_ms: Optional[float]) -> str:
    """Milliseconds rendered as a whole number."""
    if _is_missing(latency_ms):
        return EMPTY_RESULT
    return _to_fixed(latency_ms, 0)
