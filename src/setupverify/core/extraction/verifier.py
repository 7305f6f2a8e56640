"""ExtractionVerifier: validate the embedded payload with ``innoextract``.

Steps for one installer head:

1. Probe: list contained files with sizes and checksums. A failed probe
   ends the stage for that head (``probe_failed``).
2. Tally: every listed file must carry an md5 or sha1 checksum, otherwise
   ``checksum_info_mismatch`` (the stage continues).
3. RAR detection: a ``-01`` part holding a RAR archive marks the head as
   having unverifiable parts. This is informational only.
4. Test extraction (optional): ``innoextract --test`` verifies every file
   checksum. RAR parts need ``--gog`` and an unrar backend; when either is
   unavailable the RAR parts are skipped with a warning and only the head
   payload is tested.
"""

from __future__ import annotations

import logging
import shutil
from typing import Callable

from setupverify.core.extraction.probe import format_size, parse_listing
from setupverify.core.extraction.rar import is_rar_file
from setupverify.core.models import (
    CheckOutcome,
    ErrorCode,
    InstallerHead,
    Stage,
    StageResult,
)
from setupverify.core.sink import STYLE_DIM, STYLE_ERROR, OutputSink
from setupverify.core.tools import (
    EXTRACTOR_TOOL,
    ToolResult,
    ToolRunner,
    rar_backend_available,
    run_tool,
)

logger = logging.getLogger(__name__)

PROBE_ARGS: tuple[str, ...] = ("--list", "--list-sizes", "--list-checksums")
TEST_ARGS: tuple[str, ...] = ("--test",)
RAR_MODE_ARG = "--gog"


class ExtractionVerifier:
    """Probes and test-extracts installer heads.

    Args:
        tool: Extractor executable.
        test_extract: Run the full test extraction after probing.
        rar_mode: Allow ``--gog`` extraction of RAR-format parts.
        timeout: Seconds allowed per tool invocation (None = no limit).
        runner: Tool runner, ``run_tool`` unless testing.
        which: PATH lookup used to find a RAR backend.
    """

    def __init__(
        self,
        *,
        tool: str = EXTRACTOR_TOOL,
        test_extract: bool = True,
        rar_mode: bool = True,
        timeout: float | None = None,
        runner: ToolRunner = run_tool,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self.tool = tool
        self.test_extract = test_extract
        self.rar_mode = rar_mode
        self.timeout = timeout
        self._run = runner
        self._which = which

    def verify(self, head: InstallerHead, sink: OutputSink) -> StageResult:
        """Run probe, tally, RAR detection and (optionally) test extraction."""
        result = StageResult(Stage.EXTRACTION)

        probe = self._run([self.tool, *PROBE_ARGS, str(head.path)], self.timeout)
        if not probe.ok:
            result.outcomes.append(self._tool_failure(head, probe, ErrorCode.PROBE_FAILED))
            self._echo_output(probe, sink)
            return result

        summary = parse_listing(probe.output)
        sink.detail(
            f"Files: {summary.file_count}, total size: {format_size(summary.total_size)}"
        )
        sink.detail(
            "Checksums: "
            + ", ".join(f"{algo} {count}" for algo, count in summary.checksums.items()),
            STYLE_DIM,
        )
        if not summary.consistent:
            result.outcomes.append(
                CheckOutcome.failed(
                    head.name,
                    ErrorCode.CHECKSUM_INFO_MISMATCH,
                    f"{summary.file_count} files but {summary.checksum_total} checksums",
                )
            )

        first = head.first_part
        if first is not None and is_rar_file(first.path):
            result.has_rar_parts = True
            sink.detail(f"{first.name} is a RAR archive; its checksums are not recorded.")

        if not self.test_extract:
            if not result.failures:
                result.outcomes.append(CheckOutcome.passed(head.name, "probe only"))
            return result

        args = [self.tool, *TEST_ARGS]
        if result.has_rar_parts:
            if self.rar_mode and rar_backend_available(self._which):
                args.append(RAR_MODE_ARG)
            else:
                why = "disabled" if not self.rar_mode else "no unrar/unar backend found"
                note = f"RAR bin files not extracted ({why})"
                result.notes.append(note)
                sink.warning(note)
        args.append(str(head.path))

        extraction = self._run(args, self.timeout)
        if extraction.ok:
            result.outcomes.append(CheckOutcome.passed(head.name, "test extraction ok"))
        else:
            result.outcomes.append(
                self._tool_failure(head, extraction, ErrorCode.EXTRACTION_FAILED)
            )
            self._echo_output(extraction, sink)
        return result

    def _tool_failure(
        self, head: InstallerHead, run: ToolResult, code: ErrorCode,
    ) -> CheckOutcome:
        if run.timed_out:
            return CheckOutcome.failed(
                head.name,
                ErrorCode.TOOL_TIMEOUT,
                f"{self.tool} timed out after {self.timeout}s",
            )
        return CheckOutcome.failed(head.name, code, f"{code.description} (exit {run.returncode})")

    @staticmethod
    def _echo_output(run: ToolResult, sink: OutputSink) -> None:
        for line in run.output.splitlines()[-10:]:
            if line.strip():
                sink.detail(f"  {line}", STYLE_ERROR)
