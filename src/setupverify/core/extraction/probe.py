"""Parsing of the extractor's file listing.

``innoextract --list --list-sizes --list-checksums`` prints one line per
contained file, e.g.::

     - "app/data/sound.pak" [41943040] md5:0cc175b9c0f1b6a831c399e269772661
     - "app/readme.txt" (1.21 KiB) sha1:86f7e437faa5a7fce15d1ddcb9eaeaea377667b8

Only the quoted-name prefix is fixed. The size may be a raw byte count or a
human-readable figure, and the checksum may be absent. Anything that does
not start with ``- "name"`` (banners, "Done." lines) is ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# The two checksum algorithms the installer format records.
RECOGNIZED_ALGORITHMS: tuple[str, ...] = ("md5", "sha1")

_ENTRY_RE = re.compile(r'^\s*-\s+"(?P<name>[^"]*)"(?P<rest>.*)$')
_CHECKSUM_RE = re.compile(
    r"\b(?P<algo>md5|sha-?1|crc32|adler32)\s*[:=]?\s*(?P<value>[0-9a-f]{8,40})\b",
    re.IGNORECASE,
)
_SIZE_RE = re.compile(
    r"(?P<num>\d+(?:\.\d+)?)\s*(?P<unit>bytes|B|KiB|MiB|GiB|TiB)?(?![\w.])"
)

_UNITS: dict[str, int] = {
    "": 1,
    "b": 1,
    "bytes": 1,
    "kib": 1024,
    "mib": 1024 ** 2,
    "gib": 1024 ** 3,
    "tib": 1024 ** 4,
}


@dataclass
class ProbeSummary:
    """Totals gathered from a listing.

    Attributes:
        file_count: Number of listed files.
        total_size: Sum of declared sizes in bytes.
        checksums: Count of files per recognized checksum algorithm.
    """

    file_count: int = 0
    total_size: int = 0
    checksums: dict[str, int] = field(
        default_factory=lambda: {algo: 0 for algo in RECOGNIZED_ALGORITHMS}
    )

    @property
    def checksum_total(self) -> int:
        return sum(self.checksums.values())

    @property
    def consistent(self) -> bool:
        """True if every listed file carries a recognized checksum."""
        return self.file_count == self.checksum_total


def _parse_size(text: str) -> int:
    match = _SIZE_RE.search(text)
    if match is None:
        return 0
    unit = (match.group("unit") or "").lower()
    return int(float(match.group("num")) * _UNITS[unit])


def parse_listing(output: str) -> ProbeSummary:
    """Tally files, sizes and checksum algorithms from listing output."""
    summary = ProbeSummary()
    for line in output.splitlines():
        entry = _ENTRY_RE.match(line)
        if entry is None:
            continue
        summary.file_count += 1
        rest = entry.group("rest")

        for match in _CHECKSUM_RE.finditer(rest):
            algo = match.group("algo").lower().replace("-", "")
            if algo in summary.checksums:
                summary.checksums[algo] += 1
        summary.total_size += _parse_size(_CHECKSUM_RE.sub("", rest))
    return summary


def format_size(size: int) -> str:
    """Render a byte count the way the extractor does (binary units)."""
    value = float(size)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if value < 1024:
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.2f} {unit}"
        value /= 1024
    return f"{value:.2f} TiB"
