"""Console and logging setup for the setupverify CLI.

All run output goes through an ``OutputSink`` wrapping a Rich console; log
records go to stderr through a ``RichHandler``. Both honour the colour and
silent switches so that ``-S`` leaves nothing but the exit status.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from setupverify.core.sink import OutputSink, Verbosity, make_console

_LOG_LEVELS: dict[int, int] = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}


def verbosity_for(*, compact: bool, silent: bool) -> Verbosity:
    """Map the CLI switches to an output level. Silent wins over compact."""
    if silent:
        return Verbosity.SILENT
    if compact:
        return Verbosity.COMPACT
    return Verbosity.NORMAL


def make_sink(*, compact: bool = False, silent: bool = False, color: bool = True) -> OutputSink:
    """Create the output sink for a run."""
    console = make_console(color=color, silent=silent)
    return OutputSink(console=console, verbosity=verbosity_for(compact=compact, silent=silent))


def configure_logging(verbose: int = 0, *, color: bool = True, silent: bool = False) -> None:
    """Attach a Rich log handler to the package logger.

    Args:
        verbose: Number of ``-v`` flags (0 = warnings, 1 = info, 2+ = debug).
        color: Colourise log output.
        silent: Suppress all log output.
    """
    logger = logging.getLogger("setupverify")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    if silent:
        logger.setLevel(logging.CRITICAL + 1)
        return
    logger.setLevel(_LOG_LEVELS.get(min(verbose, 2), logging.DEBUG))
    console = Console(stderr=True, no_color=not color)
    logger.addHandler(RichHandler(console=console, show_time=False, show_path=False))
