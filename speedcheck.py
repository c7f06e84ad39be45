#!/usr/bin/env python3
"""
Speedcheck CLI -- latency, download and upload against a speedcheck server.

Usage::

    python speedcheck.py                              # rich dashboard
    python speedcheck.py --url http://host:3000/api   # another server
    python speedcheck.py --simple                     # plain text
    python speedcheck.py --json                       # JSON to stdout
    python speedcheck.py -o result.json               # save to file
    python speedcheck.py --upload-size 1048576        # smaller upload
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Optional

from client.api import Server
from client.config import load_config, save_config
from client.runner import RunStatus, SpeedtestRunner
from ui.dashboard import (
    RunDisplay,
    console,
    err_console,
    print_final_results,
    print_header,
    print_phase_table,
)
from ui.logging_setup import configure_logging
from ui.output import create_result_json, display_state, format_text_result, save_json


# ---------------------------------------------------------------------------
# Parameter validation
# ---------------------------------------------------------------------------

def _validate(url: str, download_file: str, download_size: int, upload_size: int) -> None:
    """Raise ``ValueError`` if any parameter is out of range."""
    if not url.startswith(("http://", "https://")):
        raise ValueError("Server URL must start with http:// or https://")
    if not download_file or "/" in download_file or ".." in download_file:
        raise ValueError("Download file must be a plain file name")
    if download_size <= 0:
        raise ValueError("Download size must be a positive number of bytes")
    if upload_size <= 0:
        raise ValueError("Upload size must be a positive number of bytes")


def save_defaults(args: argparse.Namespace) -> str:
    """Persist the server and payload options as the new defaults."""
    config = load_config()
    config.update(
        base_url=args.url,
        download_file=args.download_file,
        download_size=args.download_size,
        upload_size=args.upload_size,
    )
    return save_config(config)


# ---------------------------------------------------------------------------
# Core test runner
# ---------------------------------------------------------------------------

async def run_speedcheck(
    *,
    url: str,
    download_file: str,
    download_size: int,
    upload_size: int,
    json_output: bool = False,
    output_file: Optional[str] = None,
    simple: bool = False,
) -> dict:
    """Execute one test run and return a JSON-serialisable dict."""

    show_ui = not json_output and not simple
    server = Server.from_url(url)

    if show_ui:
        print_header(server.base_url)

    runner = SpeedtestRunner(
        server,
        download_file=download_file,
        download_size=download_size,
        upload_size=upload_size,
    )

    display = RunDisplay() if show_ui else None
    if display:
        runner.subscribe(display)

    try:
        run = await runner.run()
    finally:
        if display:
            display.stop()

    state = display_state(run)

    if show_ui:
        print_phase_table(run)
        print_final_results(state)
    elif simple:
        print(format_text_result(run, server.base_url))

    result_json = create_result_json(run, server_info=server.to_dict())

    if json_output:
        print(json.dumps(result_json, indent=2))

    if output_file:
        save_json(result_json, output_file)
        if not json_output:
            console.print(f"\n[green]Results saved to:[/green] {output_file}")

    return result_json


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def main() -> None:
    config = load_config()

    parser = argparse.ArgumentParser(
        description="Speedcheck CLI -- latency, download and upload measurement",
    )
    # Output modes
    parser.add_argument("--json", "-j", action="store_true", help="Output results as JSON")
    parser.add_argument("--output", "-o", type=str, metavar="FILE", help="Save results to JSON file")
    parser.add_argument("--simple", "-s", action="store_true", help="Simple output mode (no dashboard)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log protocol details")

    # Server and payloads
    parser.add_argument("--url", type=str, default=config["base_url"], metavar="URL", help="Server API root (default: %(default)s)")
    parser.add_argument("--download-file", type=str, default=config["download_file"], metavar="NAME", help="Asset to download (default: %(default)s)")
    parser.add_argument("--download-size", type=int, default=config["download_size"], metavar="BYTES", help="Declared size of the asset (default: %(default)s)")
    parser.add_argument("--upload-size", type=int, default=config["upload_size"], metavar="BYTES", help="Bytes to upload (default: %(default)s)")
    parser.add_argument("--save-defaults", action="store_true", help="Store the server and payload options above as defaults and exit")

    args = parser.parse_args()

    configure_logging("DEBUG" if args.verbose else "WARNING")

    try:
        _validate(
            url=args.url,
            download_file=args.download_file,
            download_size=args.download_size,
            upload_size=args.upload_size,
        )
    except ValueError as exc:
        err_console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)

    if args.save_defaults:
        path = save_defaults(args)
        console.print(f"[green]Defaults saved to:[/green] {path}")
        return

    try:
        result = asyncio.run(
            run_speedcheck(
                url=args.url,
                download_file=args.download_file,
                download_size=args.download_size,
                upload_size=args.upload_size,
                json_output=args.json,
                output_file=args.output,
                simple=args.simple,
            )
        )
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Test cancelled by user[/yellow]")
        sys.exit(1)
    except Exception as exc:
        err_console.print(f"\n[red]Error: {exc}[/red]")
        sys.exit(1)

    if result["status"] != RunStatus.COMPLETE.value:
        sys.exit(1)


if __name__ == "__main__":
    main()
