"""Data models for signature output classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping


class LineKind(Enum):
    """How a line of signature-verifier output was classified."""

    KNOWN = "known"
    UNKNOWN = "unknown"
    SUCCESS = "success"
    ERROR = "error"
    NOISE = "noise"
    PLAIN = "plain"


@dataclass(frozen=True)
class ClassifiedLine:
    """One line of verifier output with its classification.

    Attributes:
        text: The original line, without the trailing newline.
        kind: Classification result.
        label: Certificate field label ("Subject", "Issuer", "Serial")
            for KNOWN/UNKNOWN lines, else None.
        value: The field value for KNOWN/UNKNOWN lines, else None.
    """

    text: str
    kind: LineKind
    label: str | None = None
    value: str | None = None


def _flatten(groups: Mapping[str, Iterable[str] | str] | Iterable[str] | None) -> frozenset[str]:
    """Flatten grouped known strings into one exact-match set.

    Each group is either a list of strings or a newline-delimited text
    block. Blank lines and surrounding whitespace are dropped.
    """
    if groups is None:
        return frozenset()
    blocks = groups.values() if isinstance(groups, Mapping) else [groups]
    values: set[str] = set()
    for block in blocks:
        lines = block.splitlines() if isinstance(block, str) else block
        values.update(line.strip() for line in lines if line and line.strip())
    return frozenset(values)


@dataclass(frozen=True)
class KnownStrings:
    """Certificate field values that are recognised on sight.

    Used only to colour output: a known subject is shown as such, but the
    pass/fail verdict never depends on these sets.
    """

    subjects: frozenset[str] = field(default_factory=frozenset)
    issuers: frozenset[str] = field(default_factory=frozenset)
    serials: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_groups(cls, subjects=None, issuers=None, serials=None) -> KnownStrings:
        """Build from grouped lists or newline-delimited blocks."""
        return cls(
            subjects=_flatten(subjects),
            issuers=_flatten(issuers),
            serials=_flatten(serials),
        )

    def for_label(self, label: str) -> frozenset[str]:
        return {
            "subject": self.subjects,
            "issuer": self.issuers,
            "serial": self.serials,
        }.get(label.lower(), frozenset())

    def is_known(self, label: str, value: str) -> bool:
        return value in self.for_label(label)
