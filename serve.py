#!/usr/bin/env python3
"""Entry point for running the speed test server."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from aiohttp import web

from server.app import create_app
from server.assets import describe_asset, ensure_asset
from server.config import ServerConfig, load_server_config
from ui.logging_setup import configure_logging

LOGGER = logging.getLogger("serve")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Speedcheck server")
    parser.add_argument("--config", default=None, help="Path to a JSON config file")
    parser.add_argument("--host", default=None, help="Override bind host")
    parser.add_argument("--port", type=int, default=None, help="Override port (else $PORT, else 3000)")
    parser.add_argument("--download-dir", default=None, help="Directory holding download assets")
    parser.add_argument("--public-dir", default=None, help="Directory of static UI files")
    parser.add_argument("--provision", action="store_true", help="Create the download asset if missing")
    return parser.parse_args()


def apply_overrides(config: ServerConfig, args: argparse.Namespace) -> ServerConfig:
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    if args.download_dir:
        config.download_dir = Path(args.download_dir).resolve()
    if args.public_dir:
        config.public_dir = Path(args.public_dir).resolve()
    return config


def main() -> None:
    args = parse_args()
    config = apply_overrides(load_server_config(args.config), args)
    configure_logging(config.log_level, config.log_file)

    if args.provision:
        ensure_asset(config.download_dir, config.download_file, config.download_size)

    asset = describe_asset(config.download_dir, config.download_file)
    if asset is None:
        LOGGER.warning(
            "Download asset %s not found in %s (run with --provision)",
            config.download_file,
            config.download_dir,
        )
    elif asset.size != config.download_size:
        LOGGER.warning(
            "Download asset %s is %d bytes, clients expect %d",
            asset.filename,
            asset.size,
            config.download_size,
        )

    app = create_app(config)
    LOGGER.info("Speed test server running at http://%s:%d", config.host, config.port)
    web.run_app(app, host=config.host, port=config.port, print=None)


if __name__ == "__main__":
    main()
