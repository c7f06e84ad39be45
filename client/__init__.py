"""Speed test client library -- probing, metering, and orchestration."""

from .api import Server, SpeedcheckAPI
from .download import DownloadMeter, DownloadResult
from .errors import (
    DurationInvalid,
    NetworkFailure,
    RunInProgressError,
    ServerStatusFailure,
    SizeMismatch,
    SpeedtestError,
)
from .latency import LatencyProber, LatencyResult
from .runner import (
    PhaseKind,
    PhaseResult,
    PhaseStatus,
    RunStatus,
    SpeedtestRunner,
    TestRun,
)
from .stats import TransferSample, bytes_to_mbps, format_latency, format_speed
from .upload import UploadMeter, UploadResult

__all__ = [
    "DownloadMeter",
    "DownloadResult",
    "DurationInvalid",
    "LatencyProber",
    "LatencyResult",
    "NetworkFailure",
    "PhaseKind",
    "PhaseResult",
    "PhaseStatus",
    "RunInProgressError",
    "RunStatus",
    "Server",
    "ServerStatusFailure",
    "SizeMismatch",
    "SpeedcheckAPI",
    "SpeedtestError",
    "SpeedtestRunner",
    "TestRun",
    "TransferSample",
    "UploadMeter",
    "UploadResult",
    "bytes_to_mbps",
    "format_latency",
    "format_speed",
]
