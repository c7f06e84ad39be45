"""
User configuration file support.

Reads/writes ``~/.speedcheck/config.json``.

Supported keys::

    base_url = "http://localhost:3000/api"   # speed test server API root
    download_file = "10MB.bin"               # asset requested by the download phase
    download_size = 10485760                 # declared size of that asset, bytes
    upload_size = 5242880                    # generated upload payload, bytes
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

from .constants import (
    DEFAULT_BASE_URL,
    DOWNLOAD_FILE,
    DOWNLOAD_FILE_SIZE,
    UPLOAD_DATA_SIZE,
)

_CONFIG_DIR = os.path.join(Path.home(), ".speedcheck")
_CONFIG_FILE = "config.json"


def _config_path() -> str:
    return os.path.join(_CONFIG_DIR, _CONFIG_FILE)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULTS: Dict[str, Any] = {
    "base_url": DEFAULT_BASE_URL,
    "download_file": DOWNLOAD_FILE,
    "download_size": DOWNLOAD_FILE_SIZE,
    "upload_size": UPLOAD_DATA_SIZE,
}


# ---------------------------------------------------------------------------
# Read / Write
# ---------------------------------------------------------------------------

def load_config() -> Dict[str, Any]:
    """Load config from disk, returning defaults for missing keys."""
    path = _config_path()
    config = dict(DEFAULTS)

    if not os.path.isfile(path):
        return config

    try:
        with open(path, encoding="utf-8") as fh:
            user = json.load(fh)
        if isinstance(user, dict):
            config.update(user)
    except (json.JSONDecodeError, IOError):
        pass  # corrupt file; use defaults

    return config


def save_config(config: Dict[str, Any]) -> str:
    """Write *config* to disk.  Returns the file path."""
    path = _config_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as fh:
        json.dump(config, fh, indent=2, ensure_ascii=False)

    return path
