"""
Output formatting -- display state, JSON export, and plain text.
"""
from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from client.constants import EMPTY_RESULT, ERROR_RESULT
from client.runner import FALLBACK_MESSAGE, PhaseKind, PhaseResult, PhaseStatus, RunStatus, TestRun
from client.stats import bytes_to_mbps, format_latency, format_speed

_STATE_NAMES = {
    RunStatus.IDLE: "idle",
    RunStatus.RUNNING: "testing",
    RunStatus.FAILED: "error",
    RunStatus.COMPLETE: "complete",
}


# ---------------------------------------------------------------------------
# Display state
# ---------------------------------------------------------------------------

def format_phase(phase: PhaseResult) -> str:
    """Display text for one phase: its value, ``-`` if unset, ``Error`` if failed."""
    if phase.status is PhaseStatus.FAILED:
        return ERROR_RESULT
    if phase.status is not PhaseStatus.SUCCEEDED:
        return EMPTY_RESULT
    if phase.kind is PhaseKind.LATENCY:
        return format_latency(phase.value)
    return format_speed(phase.value)


def display_state(run: TestRun) -> Dict[str, str]:
    """Everything a display needs, already formatted."""
    status_text = run.message
    if run.status is RunStatus.FAILED and not status_text:
        status_text = FALLBACK_MESSAGE
    return {
        "status_text": status_text,
        "state": _STATE_NAMES[run.status],
        "phase": run.current.value if run.current else "",
        "ping": format_phase(run.latency),
        "download": format_phase(run.download),
        "upload": format_phase(run.upload),
    }


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def _phase_json(phase: PhaseResult) -> Dict[str, Any]:
    data = phase.to_dict()
    data["display"] = format_phase(phase)
    if phase.kind is not PhaseKind.LATENCY and phase.value is not None:
        data["speed_mbps"] = round(bytes_to_mbps(phase.value), 2)
    return data


def create_result_json(
    run: TestRun,
    server_info: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build a JSON-serialisable dict describing one finished run."""
    result: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status": run.status.value,
        "message": display_state(run)["status_text"],
        "ping": _phase_json(run.latency),
        "download": _phase_json(run.download),
        "upload": _phase_json(run.upload),
    }
    if server_info:
        result["server"] = server_info
    return result


def save_json(result: Dict[str, Any], filepath: str) -> None:
    """Write *result* to *filepath* atomically (write-tmp then rename)."""
    dir_path = os.path.dirname(filepath) or "."
    tmp = os.path.join(dir_path, f".tmp_{os.path.basename(filepath)}")

    try:
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(result, fh, indent=2, ensure_ascii=False)
        os.replace(tmp, filepath)
    except (IOError, OSError) as exc:
        # Clean up partial temp file
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise IOError(f"Failed to save JSON to {filepath}: {exc}") from exc


# ---------------------------------------------------------------------------
# Plain text
# ---------------------------------------------------------------------------

def with_unit(text: str, unit: str) -> str:
    if text in (EMPTY_RESULT, ERROR_RESULT):
        return text
    return f"{text} {unit}"


def format_text_result(run: TestRun, server_url: str = "") -> str:
    state = display_state(run)
    sep = "=" * 50
    mid = "-" * 50
    lines = [sep, "Speed Test Results", sep]
    if server_url:
        lines.append(f"Server: {server_url}")
    lines += [
        f"Status: {state['status_text']}",
        mid,
        f"Ping: {with_unit(state['ping'], 'ms')}",
        f"Download: {with_unit(state['download'], 'Mbps')}",
        f"Upload: {with_unit(state['upload'], 'Mbps')}",
        sep,
    ]
    return "\n".join(lines)
