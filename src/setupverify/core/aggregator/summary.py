"""Rendering of the end-of-run summary."""

from __future__ import annotations

from rich.table import Table

from setupverify.core.aggregator.report import AggregateReport
from setupverify.core.sink import STYLE_ERROR, STYLE_SUCCESS, STYLE_WARNING, OutputSink


def render_summary(report: AggregateReport, sink: OutputSink) -> None:
    """Print counts, RAR heads, diagnostics and error records."""
    if sink.silent:
        return

    sink.status("")
    if report.interrupted:
        sink.status("Interrupted: results are partial.", STYLE_WARNING)
    sink.status(f"Installers checked: {report.heads_checked}", "bold")
    style = STYLE_ERROR if report.error_count else STYLE_SUCCESS
    sink.status(f"Errors: {report.error_count}", style)
    if report.heads_checked == 0:
        sink.status("No installers found.", STYLE_ERROR)

    if report.rar_heads:
        sink.status("Installers with RAR bin files (checksums not recorded):", STYLE_WARNING)
        for path in report.rar_heads:
            sink.status(f"  {path}")

    if report.diagnostics:
        sink.status("Diagnostics:", STYLE_WARNING)
        for diag in sorted(report.diagnostics, key=lambda d: d.ordinal):
            sink.status(f"  [{diag.ordinal}] {diag.path.name}: {diag.message}")

    if report.errors:
        table = Table(title="Errors", show_header=True, header_style="bold")
        table.add_column("#", justify="right")
        table.add_column("Installer", style="bold", overflow="fold")
        table.add_column("Error", style=STYLE_ERROR, no_wrap=True)
        table.add_column("Detail")
        for record in report.sorted_errors():
            table.add_row(str(record.ordinal), str(record.path), record.code.value, record.reason)
        sink.status(table)
