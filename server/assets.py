"""
Download asset lookup and provisioning.

The download asset is provisioned out of band (or once at startup with
``--provision``), never generated per request, so its size is stable and
matches what clients declare.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

PROVISION_CHUNK = 1024 * 1024           # write size when creating the asset

LOGGER = logging.getLogger(__name__)

_FORBIDDEN = ("..", "/", "\\", "\x00")


@dataclass
class PayloadDescriptor:
    """A downloadable asset: its name and exact size in bytes."""

    filename: str
    size: int

    def to_dict(self) -> dict:
        return {"filename": self.filename, "size": self.size}


def is_safe_filename(filename: str) -> bool:
    """False for empty names and anything that could walk out of the directory."""
    if not filename:
        return False
    return not any(token in filename for token in _FORBIDDEN)


def resolve_asset(directory: Path, filename: str) -> Optional[Path]:
    """
    Map *filename* to a path directly inside *directory*.

    Returns ``None`` when the name is unsafe; existence is not checked.
    """
    if not is_safe_filename(filename):
        return None
    root = Path(directory).resolve()
    path = (root / filename).resolve()
    if path.parent != root:
        return None
    return path


def describe_asset(directory: Path, filename: str) -> Optional[PayloadDescriptor]:
    path = resolve_asset(directory, filename)
    if path is None or not path.is_file():
        return None
    return PayloadDescriptor(filename=filename, size=path.stat().st_size)


def ensure_asset(directory: Path, filename: str, size: int) -> PayloadDescriptor:
    """Create *directory* and a random-filled *filename* of *size* bytes if needed."""
    directory = Path(directory)
    if not directory.exists():
        directory.mkdir(parents=True, exist_ok=True)
        LOGGER.info("Created '%s' directory.", directory)

    path = resolve_asset(directory, filename)
    if path is None:
        raise ValueError(f"Invalid asset filename: {filename!r}")

    existing = describe_asset(directory, filename)
    if existing is not None and existing.size == size:
        return existing

    tmp = path.with_name(f".tmp_{filename}")
    remaining = size
    try:
        with open(tmp, "wb") as fh:
            while remaining > 0:
                block = min(PROVISION_CHUNK, remaining)
                fh.write(os.urandom(block))
                remaining -= block
        os.replace(tmp, path)
    except OSError:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise

    LOGGER.info("Provisioned %s (%d bytes)", path, size)
    return PayloadDescriptor(filename=filename, size=size)
