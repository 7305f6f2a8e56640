"""Decoding of the checksum manifest embedded at the end of installer heads.

Submodules
----------
- ``models``: ChecksumManifest and the EMPTY_DIGEST sentinel.
- ``parser``: Marker search and field decoding.

All public names are re-exported here::

    from setupverify.core.trailer import ChecksumManifest, parse_trailer, read_manifest
"""

from setupverify.core.trailer.models import EMPTY_DIGEST, ChecksumManifest
from setupverify.core.trailer.parser import (
    MARKER,
    MAX_PARTS,
    parse_trailer,
    read_manifest,
    read_tail,
)

__all__ = [
    "ChecksumManifest",
    "EMPTY_DIGEST",
    "MARKER",
    "MAX_PARTS",
    "parse_trailer",
    "read_manifest",
    "read_tail",
]
