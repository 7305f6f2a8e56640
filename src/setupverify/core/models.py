"""Shared data models for the verification pipeline.

Defines the installer inputs (``InstallerHead``, ``PartFile``), the error
taxonomy (``ErrorCode``), and the per-stage result types (``CheckOutcome``,
``StageResult``) exchanged between the stage verifiers and the aggregator.

These are pure data holders with no I/O, so every stage and the CLI
formatters can import them without pulling in subprocess or hashing code.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# Part files: "<head-basename>-NN.bin", NN zero-padded from 01.
PART_SUFFIX_RE = re.compile(r"-(\d{2})\.bin$", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Stage and error taxonomy
# ---------------------------------------------------------------------------


class Stage(Enum):
    """The three independent verification stages, in execution order."""

    SIGNATURE = "signature"
    CHECKSUM = "checksum"
    EXTRACTION = "extraction"


class Status(Enum):
    """Outcome status of a single check."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class ErrorCode(Enum):
    """Per-installer failure reasons. None of these abort the run."""

    NO_SIGNATURE_FOUND = "no_signature_found"
    SIGNATURE_ERROR = "signature_error"
    MANIFEST_MISSING_PARTS_EXIST = "manifest_missing_parts_exist"
    SPURIOUS_PARTS = "spurious_parts"
    WRONG_CHECKSUM = "wrong_checksum"
    WRONG_PART_COUNT = "wrong_part_count"
    MALFORMED_MANIFEST = "malformed_manifest"
    PROBE_FAILED = "probe_failed"
    CHECKSUM_INFO_MISMATCH = "checksum_info_mismatch"
    EXTRACTION_FAILED = "extraction_failed"
    TOOL_TIMEOUT = "tool_timeout"

    @property
    def description(self) -> str:
        """Human-readable reason shown in reports."""
        return _DESCRIPTIONS[self]


_DESCRIPTIONS: dict[ErrorCode, str] = {
    ErrorCode.NO_SIGNATURE_FOUND: "no digital signature found",
    ErrorCode.SIGNATURE_ERROR: "digital signature error",
    ErrorCode.MANIFEST_MISSING_PARTS_EXIST: "no checksum manifest but bin files exist",
    ErrorCode.SPURIOUS_PARTS: "bin files exist but none are expected",
    ErrorCode.WRONG_CHECKSUM: "wrong checksum",
    ErrorCode.WRONG_PART_COUNT: "wrong number of bin files",
    ErrorCode.MALFORMED_MANIFEST: "malformed checksum manifest",
    ErrorCode.PROBE_FAILED: "probing failed",
    ErrorCode.CHECKSUM_INFO_MISMATCH: "checksum info mismatch",
    ErrorCode.EXTRACTION_FAILED: "extraction failed",
    ErrorCode.TOOL_TIMEOUT: "external tool timed out",
}


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PartFile:
    """A numbered part file belonging to an installer head.

    Attributes:
        path: Location of the part on disk.
        ordinal: The ``NN`` parsed from ``<basename>-NN.bin`` (01 = first).
    """

    path: Path
    ordinal: int

    @property
    def name(self) -> str:
        return self.path.name

    @classmethod
    def from_path(cls, path: Path) -> PartFile | None:
        """Build a PartFile if ``path`` follows the part naming convention."""
        match = PART_SUFFIX_RE.search(path.name)
        if match is None:
            return None
        return cls(path=path, ordinal=int(match.group(1)))

    @property
    def head_stem(self) -> str:
        """File name stem of the head this part belongs to."""
        return PART_SUFFIX_RE.sub("", self.name)


@dataclass(frozen=True)
class InstallerHead:
    """An installer head executable and the part files discovered for it.

    Attributes:
        path: Path of the head executable (its identity).
        parts: Part files ordered by ordinal. Empty when the head ships alone.
    """

    path: Path
    parts: tuple[PartFile, ...] = ()

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def first_part(self) -> PartFile | None:
        """The ``-01`` part, if present."""
        for part in self.parts:
            if part.ordinal == 1:
                return part
        return None


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CheckOutcome:
    """Result of one check inside a stage.

    Attributes:
        status: PASSED, FAILED or SKIPPED.
        subject: What was checked (a file name, or the head for head-level
            checks).
        code: Taxonomy code, set only for FAILED outcomes.
        reason: Free-text detail shown next to the verdict.
    """

    status: Status
    subject: str
    code: ErrorCode | None = None
    reason: str = ""

    @classmethod
    def passed(cls, subject: str, reason: str = "") -> CheckOutcome:
        return cls(Status.PASSED, subject, None, reason)

    @classmethod
    def failed(cls, subject: str, code: ErrorCode, reason: str = "") -> CheckOutcome:
        return cls(Status.FAILED, subject, code, reason or code.description)

    @classmethod
    def skipped(cls, subject: str, reason: str) -> CheckOutcome:
        return cls(Status.SKIPPED, subject, None, reason)

    @property
    def is_failure(self) -> bool:
        return self.status is Status.FAILED


@dataclass
class StageResult:
    """Everything one stage produced for one installer head.

    Attributes:
        stage: Which stage ran.
        outcomes: Individual check outcomes, in the order they were made.
        notes: Diagnostics that are not failures (tool disagreement,
            skipped RAR extraction, etc.).
        has_rar_parts: True if the stage identified RAR-format parts.
    """

    stage: Stage
    outcomes: list[CheckOutcome] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    has_rar_parts: bool = False

    @property
    def failures(self) -> list[CheckOutcome]:
        return [o for o in self.outcomes if o.is_failure]

    @property
    def passed(self) -> bool:
        """True if no outcome failed."""
        return not self.failures
