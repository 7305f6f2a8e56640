"""SignatureClassifier: run the signature verifier and judge its output.

Verdict rules, in order:

1. The output says no signature was found -> ``no_signature_found``.
   Older verifier releases exit 0 in that case, so the phrase wins over
   the exit status.
2. Any recognised failure marker, or a non-zero exit status
   -> ``signature_error``.
3. Otherwise the signature passed.

When the exit status and the recognised markers point in different
directions the stage adds a diagnostic note instead of silently picking one.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.text import Text

from setupverify.core.models import (
    CheckOutcome,
    ErrorCode,
    InstallerHead,
    Stage,
    StageResult,
)
from setupverify.core.signature.models import ClassifiedLine, KnownStrings, LineKind
from setupverify.core.signature.parsers import SignatureOutputParser, default_parser
from setupverify.core.sink import (
    STYLE_ERROR,
    STYLE_KNOWN,
    STYLE_SUCCESS,
    STYLE_UNKNOWN,
    OutputSink,
)
from setupverify.core.tools import SIGNATURE_TOOL, ToolRunner, run_tool

logger = logging.getLogger(__name__)

_KIND_STYLES: dict[LineKind, str] = {
    LineKind.KNOWN: STYLE_KNOWN,
    LineKind.UNKNOWN: STYLE_UNKNOWN,
    LineKind.SUCCESS: STYLE_SUCCESS,
    LineKind.ERROR: STYLE_ERROR,
}


class SignatureClassifier:
    """Verifies installer signatures through an external verifier.

    Args:
        known: Known certificate field values (display only).
        ca_bundle: CA bundle handed to the verifier, if any.
        tool: Verifier executable.
        parser: Output parser matching the verifier's dialect.
        unfiltered: Show boilerplate lines the parser marks as noise.
        timeout: Seconds allowed for the verifier (None = no limit).
        runner: Tool runner, ``run_tool`` unless testing.
    """

    def __init__(
        self,
        *,
        known: KnownStrings | None = None,
        ca_bundle: Path | None = None,
        tool: str = SIGNATURE_TOOL,
        parser: SignatureOutputParser | None = None,
        unfiltered: bool = False,
        timeout: float | None = None,
        runner: ToolRunner = run_tool,
    ) -> None:
        self.known = known or KnownStrings()
        self.ca_bundle = ca_bundle
        self.tool = tool
        self.parser = parser or default_parser()
        self.unfiltered = unfiltered
        self.timeout = timeout
        self._run = runner

    def command(self, head: InstallerHead) -> list[str]:
        """Argument vector for verifying ``head``."""
        argv = [self.tool, "verify"]
        if self.ca_bundle is not None:
            argv += ["-CAfile", str(self.ca_bundle)]
        argv += ["-in", str(head.path)]
        return argv

    def verify(self, head: InstallerHead, sink: OutputSink) -> StageResult:
        """Run the verifier on ``head`` and classify the result."""
        result = StageResult(Stage.SIGNATURE)
        run = self._run(self.command(head), self.timeout)
        lines = self.parser.classify(run.output, self.known)
        self._echo(lines, sink)

        if run.timed_out:
            result.outcomes.append(
                CheckOutcome.failed(
                    head.name,
                    ErrorCode.TOOL_TIMEOUT,
                    f"{self.tool} timed out after {self.timeout}s",
                )
            )
            return result

        missing = self.parser.reports_missing_signature(run.output)
        errors = [line for line in lines if line.kind is LineKind.ERROR]
        successes = [line for line in lines if line.kind is LineKind.SUCCESS]

        if missing:
            result.outcomes.append(CheckOutcome.failed(head.name, ErrorCode.NO_SIGNATURE_FOUND))
        elif errors or run.returncode != 0:
            reason = errors[0].text.strip() if errors else f"exit status {run.returncode}"
            result.outcomes.append(
                CheckOutcome.failed(head.name, ErrorCode.SIGNATURE_ERROR, reason)
            )
        else:
            result.outcomes.append(CheckOutcome.passed(head.name))

        note = self._disagreement(run.returncode, missing or bool(errors), bool(successes))
        if note:
            logger.warning("%s: %s", head.path, note)
            result.notes.append(note)
            sink.warning(note)
        return result

    @staticmethod
    def _disagreement(returncode: int, failed_markers: bool, success_markers: bool) -> str:
        if failed_markers and returncode == 0:
            return "verifier reported a failure but exited with status 0"
        if returncode != 0 and success_markers and not failed_markers:
            return f"verifier reported success but exited with status {returncode}"
        return ""

    def _echo(self, lines: list[ClassifiedLine], sink: OutputSink) -> None:
        for line in lines:
            if line.kind is LineKind.NOISE and not self.unfiltered:
                continue
            if line.kind in (LineKind.KNOWN, LineKind.UNKNOWN):
                text = Text.assemble(
                    (f"{line.label}: ", ""),
                    (line.value or "", _KIND_STYLES[line.kind]),
                    (f"  [{line.kind.value}]", "dim"),
                )
                sink.detail(text)
            else:
                sink.detail(line.text, _KIND_STYLES.get(line.kind))
