"""Locate and decode the checksum trailer of an installer head.

Trailer layout (plain ASCII at the end of an otherwise binary file)::

    ... <digest 01><digest 02>...<digest NN><NN>#GOGCRCSTRING ...
        |<------- 32 * NN chars -------->|<2>|<-- marker -->|

Decoding rules:

1. Only the LAST case-insensitive occurrence of the marker counts; the
   binary payload may contain the token by accident.
2. The two characters before the marker are the decimal part count.
3. The ``32 * NN`` characters before the count are the part digests. They
   are sliced back-to-front (the slice next to the count belongs to the
   last part) and returned part 01 first.
4. When the file is too short to hold every digest, the missing leading
   digests become ``EMPTY_DIGEST`` instead of raising.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from setupverify.core.trailer.models import EMPTY_DIGEST, ChecksumManifest
from setupverify.exceptions import TrailerError

logger = logging.getLogger(__name__)

MARKER = b"#GOGCRCSTRING"
COUNT_WIDTH = 2
DIGEST_WIDTH = 32
MAX_PARTS = 99

# Largest byte span a valid trailer can occupy before the marker.
MAX_TRAILER_PREFIX = COUNT_WIDTH + DIGEST_WIDTH * MAX_PARTS

DEFAULT_WINDOW = 64 * 1024


def parse_trailer(data: bytes) -> ChecksumManifest | None:
    """Decode the checksum manifest from the tail bytes of a head.

    Args:
        data: Raw bytes, normally the last few KiB of the installer head.

    Returns:
        The decoded manifest, or None if no marker is present.

    Raises:
        TrailerError: If the marker exists but the count field before it
            is not two decimal digits.
    """
    marker_at = data.lower().rfind(MARKER.lower())
    if marker_at < 0:
        return None

    count_at = marker_at - COUNT_WIDTH
    field = data[max(count_at, 0):marker_at]
    if count_at < 0 or not (len(field) == COUNT_WIDTH and field.isdigit()):
        raise TrailerError(f"invalid part count field {field!r} before marker")
    count = int(field)

    digests: list[str] = []
    end = count_at
    for _ in range(count):
        start = end - DIGEST_WIDTH
        if start < 0:
            digests.append(EMPTY_DIGEST)
        else:
            digests.append(data[start:end].decode("ascii", errors="replace").lower())
        end = start
    digests.reverse()
    return ChecksumManifest(count=count, digests=tuple(digests))


def read_tail(path: Path, size: int) -> bytes:
    """Read at most ``size`` bytes from the end of ``path``."""
    with open(path, "rb") as fh:
        fh.seek(0, os.SEEK_END)
        length = fh.tell()
        fh.seek(max(0, length - size))
        return fh.read()


def read_manifest(path: Path, window: int = DEFAULT_WINDOW) -> ChecksumManifest | None:
    """Read the trailer of an installer head from disk and decode it.

    Only the last ``window`` bytes (plus room for a full trailer) are read,
    so multi-gigabyte heads are never loaded whole.

    Args:
        path: Installer head path.
        window: How far from the end the marker is searched for.

    Returns:
        The decoded manifest, or None if the head has no trailer.

    Raises:
        TrailerError: If the trailer is present but malformed.
        OSError: If the file cannot be read.
    """
    data = read_tail(path, window + MAX_TRAILER_PREFIX)
    manifest = parse_trailer(data)
    if manifest is None:
        logger.debug("No checksum trailer in %s", path)
    else:
        logger.debug("%s declares %d part(s)", path, manifest.count)
    return manifest
