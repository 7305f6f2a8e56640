"""RAR container detection by magic bytes.

Recent installers ship their parts as RAR volumes. The head never records
checksums for those, so they are reported separately instead of being
treated as checksum failures.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# RAR 1.5-4.x: "Rar!\x1a\x07\x00", RAR 5: "Rar!\x1a\x07\x01\x00".
RAR_MAGIC = b"Rar!\x1a\x07"


def is_rar_file(path: Path) -> bool:
    """True if the file at ``path`` starts with a RAR signature."""
    try:
        with open(path, "rb") as fh:
            head = fh.read(len(RAR_MAGIC))
    except OSError as exc:
        logger.warning("Cannot read %s: %s", path, exc)
        return False
    return head == RAR_MAGIC
