"""
Test orchestration: latency, then download, then upload.

``SpeedtestRunner.run()`` drives one ``TestRun`` through the state machine::

    Idle -> Running(Latency) -> Running(Download) -> Running(Upload) -> Complete
                  \\                  \\                  \\
                   +------------------+------------------+--> Failed

Phases never overlap.  The first failure ends the run: the failing phase is
marked ``FAILED`` and every later phase stays ``PENDING``.  There is no
retry.  Subscribers receive the same ``TestRun`` object after every
transition; they render it, the runner never does.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Tuple

import aiohttp

from .api import Server, SpeedcheckAPI
from .constants import DOWNLOAD_FILE, DOWNLOAD_FILE_SIZE, UPLOAD_DATA_SIZE
from .download import DownloadMeter
from .errors import RunInProgressError, SizeMismatch, SpeedtestError
from .latency import LatencyProber
from .upload import UploadMeter

LOGGER = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Test sequence failed."


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------

class PhaseKind(str, Enum):
    LATENCY = "Latency"
    DOWNLOAD = "Download"
    UPLOAD = "Upload"


class PhaseStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RunStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


_UNITS = {
    PhaseKind.LATENCY: "ms",
    PhaseKind.DOWNLOAD: "B/s",
    PhaseKind.UPLOAD: "B/s",
}

_STATUS_TEXT = {
    PhaseKind.LATENCY: "Testing latency...",
    PhaseKind.DOWNLOAD: "Testing download speed...",
    PhaseKind.UPLOAD: "Testing upload speed...",
}


# ---------------------------------------------------------------------------
# Run state
# ---------------------------------------------------------------------------

@dataclass
class PhaseResult:
    """Outcome of one phase.  ``value`` is ms for latency, bytes/s otherwise."""

    kind: PhaseKind
    value: Optional[float] = None
    status: PhaseStatus = PhaseStatus.PENDING
    error_message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def unit(self) -> str:
        return _UNITS[self.kind]

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "value": self.value,
            "unit": self.unit,
            "status": self.status.value,
            "error": self.error_message,
            "warnings": list(self.warnings),
        }


def _default_phases() -> List[PhaseResult]:
    return [PhaseResult(kind=kind) for kind in PhaseKind]


@dataclass
class TestRun:
    """Exactly three phases, in order, plus the overall status."""

    __test__ = False  # not a pytest test class

    phases: List[PhaseResult] = field(default_factory=_default_phases)
    status: RunStatus = RunStatus.IDLE
    current: Optional[PhaseKind] = None
    message: str = ""

    def phase(self, kind: PhaseKind) -> PhaseResult:
        for result in self.phases:
            if result.kind is kind:
                return result
        raise KeyError(kind)

    @property
    def latency(self) -> PhaseResult:
        return self.phase(PhaseKind.LATENCY)

    @property
    def download(self) -> PhaseResult:
        return self.phase(PhaseKind.DOWNLOAD)

    @property
    def upload(self) -> PhaseResult:
        return self.phase(PhaseKind.UPLOAD)

    @property
    def failed_phase(self) -> Optional[PhaseResult]:
        for result in self.phases:
            if result.status is PhaseStatus.FAILED:
                return result
        return None

    def is_consistent(self) -> bool:
        """True unless a phase ran or succeeded after an earlier failure."""
        seen_failure = False
        for result in self.phases:
            if seen_failure and result.status in (PhaseStatus.RUNNING, PhaseStatus.SUCCEEDED):
                return False
            seen_failure = seen_failure or result.status is PhaseStatus.FAILED
        return True


Listener = Callable[[TestRun], None]
PhaseStep = Callable[[aiohttp.ClientSession, PhaseResult], Awaitable[float]]


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

class SpeedtestRunner:
    """Run the three measurement phases against one server."""

    def __init__(
        self,
        server: Server,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        download_file: str = DOWNLOAD_FILE,
        download_size: int = DOWNLOAD_FILE_SIZE,
        upload_size: int = UPLOAD_DATA_SIZE,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.server = server
        self.download_file = download_file
        self.download_size = download_size
        self.upload_size = upload_size
        self.clock = clock
        self._session = session
        self._state = TestRun()
        self._running = False
        self._listeners: List[Listener] = []

    # -- Observation --------------------------------------------------------

    @property
    def state(self) -> TestRun:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._running

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* after every transition.  Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _publish(self) -> None:
        for listener in list(self._listeners):
            listener(self._state)

    # -- Entry point --------------------------------------------------------

    async def run(self) -> TestRun:
        """Discard the previous run and execute a fresh one."""
        if self._running:
            raise RunInProgressError("Run already in progress")

        self._running = True
        self._state = TestRun(status=RunStatus.RUNNING, message="Starting test...")
        self._publish()

        try:
            if self._session is not None:
                await self._run_phases(self._session)
            else:
                async with SpeedcheckAPI(self.server.base_url) as api:
                    await self._run_phases(api.session)
        finally:
            self._running = False
            if self._state.status is RunStatus.RUNNING:
                # Unexpected exception escaped a phase
                self._abort(self._state.current, None)

        return self._state

    # -- Internals ----------------------------------------------------------

    def _steps(self) -> List[Tuple[PhaseKind, PhaseStep]]:
        return [
            (PhaseKind.LATENCY, self._latency),
            (PhaseKind.DOWNLOAD, self._download),
            (PhaseKind.UPLOAD, self._upload),
        ]

    async def _run_phases(self, session: aiohttp.ClientSession) -> None:
        run = self._state

        for kind, step in self._steps():
            phase = run.phase(kind)
            phase.status = PhaseStatus.RUNNING
            run.current = kind
            run.message = _STATUS_TEXT[kind]
            self._publish()

            try:
                phase.value = await step(session, phase)
            except SpeedtestError as exc:
                LOGGER.error("%s test failed: %s", kind.value, exc)
                self._abort(kind, str(exc))
                return

            phase.status = PhaseStatus.SUCCEEDED
            self._publish()

        run.status = RunStatus.COMPLETE
        run.current = None
        run.message = "Test complete!"
        self._publish()

    def _abort(self, kind: Optional[PhaseKind], reason: Optional[str]) -> None:
        run = self._state
        if kind is not None:
            phase = run.phase(kind)
            phase.status = PhaseStatus.FAILED
            phase.value = None
            phase.error_message = reason or None
        run.status = RunStatus.FAILED
        if kind is not None and reason:
            run.message = f"{kind.value} test failed: {reason}"
        else:
            run.message = FALLBACK_MESSAGE
        self._publish()

    async def _latency(self, session: aiohttp.ClientSession, phase: PhaseResult) -> float:
        prober = LatencyProber(session, self.server, clock=self.clock)
        result = await prober.measure()
        return result.latency_ms

    async def _download(self, session: aiohttp.ClientSession, phase: PhaseResult) -> float:
        meter = DownloadMeter(
            session,
            self.server,
            filename=self.download_file,
            expected_size=self.download_size,
            clock=self.clock,
        )

        def _on_warning(mismatch: SizeMismatch) -> None:
            phase.warnings.append(mismatch.message)
            self._publish()

        meter.on_warning = _on_warning
        result = await meter.measure()
        return result.speed_bps

    async def _upload(self, session: aiohttp.ClientSession, phase: PhaseResult) -> float:
        meter = UploadMeter(session, self.server, size=self.upload_size, clock=self.clock)
        result = await meter.measure()
        return result.speed_bps
