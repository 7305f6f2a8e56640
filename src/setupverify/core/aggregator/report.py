"""AggregateReport: run-wide verification state.

The report is the only state that outlives a single installer head. It is
created empty by the aggregator, updated once per finished head, and
rendered after the last head. Every mutation holds the report's lock so
heads may finish concurrently.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path

from setupverify.core.models import ErrorCode, InstallerHead, StageResult


@dataclass(frozen=True)
class ErrorRecord:
    """A failed check, tagged with the head's sequence ordinal."""

    ordinal: int
    path: Path
    code: ErrorCode
    reason: str


@dataclass(frozen=True)
class Diagnostic:
    """A non-failing observation worth showing in the summary."""

    ordinal: int
    path: Path
    message: str


@dataclass
class AggregateReport:
    """Counters and records accumulated over one run.

    Attributes:
        heads_checked: Installer heads whose stages all completed.
        errors: Failed checks, in the order heads finished.
        rar_heads: Heads with RAR-format parts (informational).
        diagnostics: Non-failing notes such as verifier disagreement.
        interrupted: True if the run was cut short by the user.
    """

    heads_checked: int = 0
    errors: list[ErrorRecord] = field(default_factory=list)
    rar_heads: list[Path] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    interrupted: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def exit_code(self) -> int:
        """0 only if at least one head was checked and nothing failed."""
        if self.errors or self.heads_checked == 0 or self.interrupted:
            return 1
        return 0

    def record(self, ordinal: int, head: InstallerHead, results: list[StageResult]) -> None:
        """Merge one head's stage results into the report."""
        with self._lock:
            self.heads_checked += 1
            for result in results:
                for outcome in result.failures:
                    self.errors.append(
                        ErrorRecord(ordinal, head.path, outcome.code, outcome.reason)
                    )
                for note in result.notes:
                    self.diagnostics.append(Diagnostic(ordinal, head.path, note))
                if result.has_rar_parts and head.path not in self.rar_heads:
                    self.rar_heads.append(head.path)

    def sorted_errors(self) -> list[ErrorRecord]:
        """Error records ordered by head ordinal (stable within a head)."""
        return sorted(self.errors, key=lambda rec: rec.ordinal)
