"""Streaming digest of part files.

Installer heads record part checksums as 32-character MD5 hex strings, so
MD5 is the only algorithm used here. Parts are multiple gigabytes, so they
are hashed in chunks rather than read whole.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

CHUNK_SIZE = 1024 * 1024


def file_digest(path: Path, chunk_size: int = CHUNK_SIZE) -> str:
    """Compute the lowercase MD5 hex digest of a file.

    Args:
        path: File to hash.
        chunk_size: Bytes read per iteration.

    Returns:
        32-character lowercase hex string.
    """
    digest = hashlib.md5()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()
