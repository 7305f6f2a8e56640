"""Discovery of installer heads and their part files.

Naming conventions (case-insensitive):

- Heads: ``<prefix>*.exe`` inside scanned directories (default prefix
  ``setup_``), or any ``*.exe`` when all executables are requested. Files
  named explicitly on the command line are always treated as heads.
- Parts: ``<head-basename>-NN.bin`` next to the head, ``NN`` being a
  two-digit ordinal starting at 01.

Discovery Algorithm:
    1. Expand each target: files are taken as-is, directories are listed
       (recursively when requested) and filtered by the head pattern.
    2. Drop duplicates, keeping first-seen order.
    3. For each head, list its directory for matching part files and sort
       them by ordinal.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator

from setupverify.core.models import InstallerHead, PartFile

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "setup_"
HEAD_SUFFIX = ".exe"


class InstallerScanner:
    """Finds installer heads and attaches their part files.

    Args:
        prefix: File name prefix a head must start with.
        all_executables: Accept every ``.exe`` regardless of prefix.
        recursive: Descend into subdirectories of directory targets.

    Usage::

        scanner = InstallerScanner(recursive=True)
        for head in scanner.find_heads([Path("downloads")]):
            print(head.path, len(head.parts))
    """

    def __init__(
        self,
        *,
        prefix: str = DEFAULT_PREFIX,
        all_executables: bool = False,
        recursive: bool = False,
    ) -> None:
        self.prefix = prefix
        self.all_executables = all_executables
        self.recursive = recursive

    def is_head_name(self, name: str) -> bool:
        """True if a file name matches the head naming convention."""
        lowered = name.lower()
        if not lowered.endswith(HEAD_SUFFIX):
            return False
        return self.all_executables or lowered.startswith(self.prefix.lower())

    def find_heads(self, targets: Iterable[Path]) -> list[InstallerHead]:
        """Expand targets into installer heads, in discovery order."""
        seen: set[Path] = set()
        heads: list[InstallerHead] = []
        for target in targets:
            for path in self._expand(target):
                key = path.resolve()
                if key in seen:
                    continue
                seen.add(key)
                heads.append(InstallerHead(path=path, parts=find_parts(path)))
        logger.info("Discovered %d installer head(s)", len(heads))
        return heads

    def _expand(self, target: Path) -> Iterator[Path]:
        if target.is_file():
            yield target
            return
        if not target.is_dir():
            logger.warning("Not found: %s", target)
            return
        pattern = "**/*" if self.recursive else "*"
        try:
            candidates = sorted(target.glob(pattern))
        except (PermissionError, OSError):
            logger.warning("Permission denied: %s", target)
            return
        for candidate in candidates:
            try:
                if candidate.is_file() and self.is_head_name(candidate.name):
                    yield candidate
            except (PermissionError, OSError):
                continue


def find_parts(head: Path) -> tuple[PartFile, ...]:
    """List the part files belonging to ``head``, ordered by ordinal."""
    stem = head.stem.lower()
    parts: list[PartFile] = []
    try:
        entries = list(head.parent.iterdir())
    except (PermissionError, OSError):
        logger.warning("Cannot list %s", head.parent)
        return ()
    for entry in entries:
        part = PartFile.from_path(entry)
        if part is None or part.ordinal < 1 or part.head_stem.lower() != stem:
            continue
        if entry.is_file():
            parts.append(part)
    parts.sort(key=lambda p: (p.ordinal, p.name))
    return tuple(parts)
