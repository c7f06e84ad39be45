"""Configuration loading helpers for the speed test server."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from common.protocol import DEFAULT_PORT, DOWNLOAD_FILE, DOWNLOAD_FILE_SIZE

UPLOAD_LIMIT = 100 * 1024 * 1024        # per-request ceiling; 0 disables it


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    download_dir: Path = Path("download_files")
    public_dir: Optional[Path] = Path("public")
    download_file: str = DOWNLOAD_FILE
    download_size: int = DOWNLOAD_FILE_SIZE
    upload_limit: int = UPLOAD_LIMIT
    log_level: str = "INFO"
    log_file: Optional[Path] = None


_PATH_KEYS = ("download_dir", "public_dir", "log_file")


def _as_path(base: Path, value: Optional[str]) -> Optional[Path]:
    if not value:
        return None
    return (base / value).resolve()


def load_server_config(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ServerConfig:
    """
    Load server configuration from a JSON file.

    Relative paths are resolved against the file's directory (or the working
    directory when no file is given).  ``PORT`` in the environment overrides
    the configured port.
    """
    environ = os.environ if environ is None else environ
    root_dir = Path(path).resolve().parent if path else Path.cwd()
    data: Dict[str, Any] = {}

    if path:
        source = Path(path)
        if not source.exists():
            raise FileNotFoundError(f"Missing configuration file at {source}")
        with source.open("r", encoding="utf-8") as handle:
            data = json.load(handle) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {source} must contain a JSON object")

    defaults = ServerConfig()
    values: Dict[str, Any] = {}
    for key in ServerConfig.__dataclass_fields__:
        if key not in data:
            continue
        if key in _PATH_KEYS:
            values[key] = _as_path(root_dir, data[key])
        else:
            values[key] = data[key]

    if not values.get("download_dir"):
        values["download_dir"] = (root_dir / defaults.download_dir).resolve()
    if "public_dir" not in values and defaults.public_dir is not None:
        values["public_dir"] = (root_dir / defaults.public_dir).resolve()

    if environ.get("PORT"):
        values["port"] = int(environ["PORT"])

    config = ServerConfig(**values)
    config.port = int(config.port)
    config.upload_limit = int(config.upload_limit)
    config.download_size = int(config.download_size)
    return config
