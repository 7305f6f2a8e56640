"""Discovery of installer heads and their numbered part files.

Public API::

    from setupverify.discovery import InstallerScanner

    scanner = InstallerScanner(recursive=True)
    for head in scanner.find_heads([Path(".")]):
        print(f"{head.name}: {len(head.parts)} bin file(s)")
"""

from __future__ import annotations

from setupverify.discovery.scanner import (
    DEFAULT_PREFIX,
    InstallerScanner,
    find_parts,
)

__all__ = [
    "DEFAULT_PREFIX",
    "InstallerScanner",
    "find_parts",
]
