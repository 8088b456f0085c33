"""Shared helpers for run manifests."""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from pathlib import Path

_HASH_BLOCK_SIZE = 1 << 16


def sha256_file(path: Path) -> str:
    """Return the hex SHA-256 digest of the workbook at *path*."""
    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        for block in iter(lambda: fh.read(_HASH_BLOCK_SIZE), b""):
            digest.update(block)
    return digest.hexdigest()


def utcnow_iso() -> str:
    """Current UTC time as ISO-8601, to the second."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")
