"""ResultAggregator: run the verification stages over many installer heads.

Per head the stages run in a fixed order::

    Start -> [signature] -> [checksum] -> [extraction] -> Done

Each bracketed stage runs only when enabled. Stages are independent: a
failure in one never skips the next. Every failed check becomes an error
record tagged with the head's 1-based ordinal.

Heads run sequentially by default. With ``jobs > 1`` they run on a thread
pool; each head writes into a buffered sink that is flushed in one piece
when the head finishes, and the report is updated under its lock. The
summary is rendered only after every submitted head has finished.

A KeyboardInterrupt stops scheduling further heads, marks the report as
interrupted, and still produces the summary.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Iterable

from rich.text import Text

from setupverify.core.aggregator.report import AggregateReport
from setupverify.core.aggregator.summary import render_summary
from setupverify.core.checksum import ChecksumVerifier
from setupverify.core.extraction import ExtractionVerifier
from setupverify.core.models import InstallerHead, Stage, StageResult, Status
from setupverify.core.signature import SignatureClassifier
from setupverify.core.sink import (
    STYLE_DIM,
    STYLE_ERROR,
    STYLE_SUCCESS,
    STYLE_WARNING,
    OutputSink,
)

logger = logging.getLogger(__name__)

_STAGE_TITLES: dict[Stage, str] = {
    Stage.SIGNATURE: "Digital signature",
    Stage.CHECKSUM: "Bin file checksums",
    Stage.EXTRACTION: "Installer payload",
}


@dataclass
class VerifyOptions:
    """Run-level switches.

    Attributes:
        single_head: Stop after the first head (silent mode).
        jobs: Number of heads verified concurrently.
    """

    single_head: bool = False
    jobs: int = 1


class ResultAggregator:
    """Drives the enabled stages and accumulates an ``AggregateReport``.

    A stage set to None is disabled.

    Usage::

        aggregator = ResultAggregator(
            sink, signature=SignatureClassifier(), checksum=ChecksumVerifier(),
        )
        report = aggregator.run(heads)
        sys.exit(report.exit_code)
    """

    def __init__(
        self,
        sink: OutputSink,
        *,
        signature: SignatureClassifier | None = None,
        checksum: ChecksumVerifier | None = None,
        extraction: ExtractionVerifier | None = None,
        options: VerifyOptions | None = None,
    ) -> None:
        self.sink = sink
        self.options = options or VerifyOptions()
        self._stages = [
            (Stage.SIGNATURE, signature),
            (Stage.CHECKSUM, checksum),
            (Stage.EXTRACTION, extraction),
        ]

    @property
    def enabled_stages(self) -> list[Stage]:
        return [stage for stage, verifier in self._stages if verifier is not None]

    def check_head(self, ordinal: int, head: InstallerHead, sink: OutputSink) -> list[StageResult]:
        """Run every enabled stage on one head, in order."""
        sink.header(f"[{ordinal}] {head.path}")
        for part in head.parts:
            sink.detail(f"    {part.name}", STYLE_DIM)

        results: list[StageResult] = []
        for stage, verifier in self._stages:
            if verifier is None:
                continue
            sink.detail(f"{_STAGE_TITLES[stage]}:", "bold")
            result = verifier.verify(head, sink)
            self._print_stage_verdict(result, sink)
            results.append(result)

        failed = any(not r.passed for r in results)
        sink.status(
            Text.assemble(
                (head.name, "bold"),
                ": ",
                ("FAILED", STYLE_ERROR) if failed else ("PASSED", STYLE_SUCCESS),
            )
        )
        return results

    def run(self, heads: Iterable[InstallerHead]) -> AggregateReport:
        """Verify ``heads`` and render the summary.

        Args:
            heads: Installer heads in discovery order.

        Returns:
            The finished report. Its ``exit_code`` is the process status.
        """
        report = AggregateReport()
        selected = list(heads)
        if self.options.single_head:
            selected = selected[:1]
        logger.info("Verifying %d installer(s): %s", len(selected),
                    ", ".join(s.value for s in self.enabled_stages))

        try:
            if self.options.jobs > 1 and len(selected) > 1:
                self._run_concurrent(selected, report)
            else:
                self._run_sequential(selected, report)
        except KeyboardInterrupt:
            logger.warning("Interrupted; reporting partial results")
            report.interrupted = True

        render_summary(report, self.sink)
        return report

    def _run_sequential(self, heads: list[InstallerHead], report: AggregateReport) -> None:
        for ordinal, head in enumerate(heads, start=1):
            results = self.check_head(ordinal, head, self.sink)
            report.record(ordinal, head, results)

    def _run_concurrent(self, heads: list[InstallerHead], report: AggregateReport) -> None:
        def task(ordinal: int, head: InstallerHead) -> tuple[OutputSink, list[StageResult]]:
            child = self.sink.buffer()
            return child, self.check_head(ordinal, head, child)

        executor = ThreadPoolExecutor(max_workers=self.options.jobs)
        try:
            futures = {
                executor.submit(task, ordinal, head): (ordinal, head)
                for ordinal, head in enumerate(heads, start=1)
            }
            for future in as_completed(futures):
                ordinal, head = futures[future]
                child, results = future.result()
                self.sink.flush(child)
                report.record(ordinal, head, results)
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    @staticmethod
    def _print_stage_verdict(result: StageResult, sink: OutputSink) -> None:
        for outcome in result.outcomes:
            if outcome.status is Status.FAILED:
                sink.detail(f"  FAILED: {outcome.reason}", STYLE_ERROR)
            elif outcome.status is Status.SKIPPED:
                sink.detail(f"  SKIPPED: {outcome.reason}", STYLE_WARNING)
        if result.passed and any(o.status is Status.PASSED for o in result.outcomes):
            sink.detail("  PASSED", STYLE_SUCCESS)
