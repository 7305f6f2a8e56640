"""Pluggable parsers for signature-verifier output.

The signature verifier is a third-party program whose wording changes
between releases. Everything that depends on its exact phrasing lives in a
``SignatureOutputParser`` subclass: raw text goes in, ``ClassifiedLine``
records come out. Supporting a new tool release means adding or adjusting
one parser; the stage and the output code stay untouched.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

from setupverify.core.signature.models import ClassifiedLine, KnownStrings, LineKind


class SignatureOutputParser(ABC):
    """Turns raw verifier output into classified lines."""

    #: Tool the parser understands.
    tool: str = ""
    #: Output dialect version handled by this parser.
    version: str = ""

    @abstractmethod
    def classify_line(self, line: str, known: KnownStrings) -> ClassifiedLine:
        """Classify a single output line."""

    @abstractmethod
    def reports_missing_signature(self, output: str) -> bool:
        """True if the output states the file carries no signature."""

    def classify(self, output: str, known: KnownStrings) -> list[ClassifiedLine]:
        """Classify every line of ``output``."""
        return [self.classify_line(line, known) for line in output.splitlines()]


class OsslsigncodeParser(SignatureOutputParser):
    """Parser for ``osslsigncode verify`` output (1.7 through 2.x).

    Marker literals are matched case-sensitively; each wording the tool has
    used for a condition is listed explicitly.
    """

    tool = "osslsigncode"
    version = "2"

    FIELD_RE = re.compile(r"^\s*(?P<label>Subject|Issuer|Serial)\s*:\s*(?P<value>.*?)\s*$")

    SUCCESS_MARKERS: tuple[str, ...] = (
        "Signature verification: ok",
        "Signature CRL verification: ok",
        "Succeeded",
    )
    ERROR_MARKERS: tuple[str, ...] = (
        "MISMATCH",
        "Signature verification: failed",
        "failed",
        "Failed",
        "FAILED",
        "No signature found",
        "no signature found",
        "Unable to extract",
    )
    NO_SIGNATURE_PHRASE = "no signature found"

    NOISE_PREFIXES: tuple[str, ...] = (
        "Signer's certificate:",
        "Signature Index:",
        "Number of certificates:",
        "Number of signers:",
        "Message digest algorithm",
        "Current DigitalSignature",
        "Calculated DigitalSignature",
        "Authenticated attributes:",
        "Certificate expiration date:",
        "notBefore",
        "notAfter",
        "Page hash",
    )
    _SEPARATOR_RE = re.compile(r"^\s*[-=*]{3,}\s*$")

    def classify_line(self, line: str, known: KnownStrings) -> ClassifiedLine:
        field = self.FIELD_RE.match(line)
        if field is not None:
            label, value = field.group("label"), field.group("value")
            kind = LineKind.KNOWN if known.is_known(label, value) else LineKind.UNKNOWN
            return ClassifiedLine(line, kind, label, value)
        if any(marker in line for marker in self.ERROR_MARKERS):
            return ClassifiedLine(line, LineKind.ERROR)
        if any(marker in line for marker in self.SUCCESS_MARKERS):
            return ClassifiedLine(line, LineKind.SUCCESS)
        stripped = line.strip()
        if not stripped or self._SEPARATOR_RE.match(stripped):
            return ClassifiedLine(line, LineKind.NOISE)
        if stripped.startswith(self.NOISE_PREFIXES):
            return ClassifiedLine(line, LineKind.NOISE)
        return ClassifiedLine(line, LineKind.PLAIN)

    def reports_missing_signature(self, output: str) -> bool:
        return self.NO_SIGNATURE_PHRASE in output.lower()


def default_parser() -> SignatureOutputParser:
    """Parser for the signature tool shipped with the default configuration."""
    return OsslsigncodeParser()
