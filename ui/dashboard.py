"""
Rich-based terminal dashboard for speed test runs.

All formatting helpers live in ``client.stats`` and ``ui.output`` -- this
module only does presentation via the ``rich`` library.
"""
from __future__ import annotations

from typing import Dict, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.status import Status
from rich.table import Table

from client.runner import PhaseStatus, RunStatus, TestRun

from .output import format_phase, with_unit

console = Console()
err_console = Console(stderr=True)

_STATE_STYLES = {
    "idle": "dim",
    "testing": "yellow",
    "error": "bold red",
    "complete": "bold green",
}


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------

def print_header(server_url: str) -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Speedcheck[/bold cyan]\n"
            f"[dim]Latency, download and upload against {server_url}[/dim]",
            border_style="cyan",
        )
    )
    console.print()


def print_phase_table(run: TestRun) -> None:
    """One row per phase with its status, raw value and any warnings."""
    table = Table(title="Phases", box=box.ROUNDED)
    table.add_column("Phase", style="bold")
    table.add_column("Status")
    table.add_column("Result", justify="right")
    table.add_column("Notes", style="dim")

    for phase in run.phases:
        style = {
            PhaseStatus.SUCCEEDED: "green",
            PhaseStatus.FAILED: "red",
            PhaseStatus.RUNNING: "yellow",
        }.get(phase.status, "dim")
        notes = phase.error_message or "; ".join(phase.warnings)
        table.add_row(
            phase.kind.value,
            f"[{style}]{phase.status.value}[/{style}]",
            format_phase(phase),
            notes,
        )

    console.print(table)


def print_final_results(state: Dict[str, str]) -> None:
    style = _STATE_STYLES.get(state["state"], "bold")
    console.print()
    console.print(
        Panel.fit(
            f"[{style}]{state['status_text']}[/{style}]\n\n"
            f"[bold white]   Ping:[/bold white]  [bold yellow]{with_unit(state['ping'], 'ms')}[/bold yellow]\n"
            f"[bold white]   Download:[/bold white]  [bold green]{with_unit(state['download'], 'Mbps')}[/bold green]\n"
            f"[bold white]   Upload:[/bold white]  [bold blue]{with_unit(state['upload'], 'Mbps')}[/bold blue]",
            title="[bold]Results[/bold]",
            border_style="cyan",
        )
    )
    console.print()


# ---------------------------------------------------------------------------
# Live status
# ---------------------------------------------------------------------------

class RunDisplay:
    """Spinner plus one line per finished phase, fed by runner transitions."""

    def __init__(self) -> None:
        self._status: Optional[Status] = None
        self._reported: set = set()

    def __call__(self, run: TestRun) -> None:
        self.update(run)

    def update(self, run: TestRun) -> None:
        for phase in run.phases:
            if phase.kind in self._reported:
                continue
            if phase.status is PhaseStatus.SUCCEEDED:
                unit = "ms" if phase.unit == "ms" else "Mbps"
                console.print(f"  [green]OK[/green] {phase.kind.value}: {format_phase(phase)} {unit}")
                for warning in phase.warnings:
                    console.print(f"     [yellow]{warning}[/yellow]")
                self._reported.add(phase.kind)
            elif phase.status is PhaseStatus.FAILED:
                console.print(f"  [red]FAILED[/red] {phase.kind.value}: {phase.error_message or 'error'}")
                self._reported.add(phase.kind)

        if run.status is RunStatus.RUNNING:
            if self._status is None:
                self._status = console.status(run.message)
                self._status.start()
            else:
                self._status.update(run.message)
        else:
            self.stop()

    def stop(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None
