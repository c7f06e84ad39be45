"""UI layer -- Rich dashboard, output formatters and logging setup."""

from .dashboard import (
    RunDisplay,
    console,
    err_console,
    print_final_results,
    print_header,
    print_phase_table,
)
from .logging_setup import configure_logging
from .output import (
    create_result_json,
    display_state,
    format_phase,
    format_text_result,
    save_json,
)

__all__ = [
    "RunDisplay",
    "configure_logging",
    "console",
    "err_console",
    "create_result_json",
    "display_state",
    "format_phase",
    "format_text_result",
    "print_final_results",
    "print_header",
    "print_phase_table",
    "save_json",
]
