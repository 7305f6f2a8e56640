"""Output sink injected into every verification stage.

Stages never print directly. They hand lines to an ``OutputSink`` which
decides, based on its ``Verbosity``, whether a line is shown at all:

    NORMAL:  stage headers, tool output detail, verdicts, warnings.
    COMPACT: one verdict line per installer plus warnings.
    SILENT:  nothing.

A sink can spawn a buffered child (``buffer()``) whose lines are replayed
into the parent in one piece by ``flush()``. The aggregator uses this when
installers are verified concurrently so that their output never interleaves.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import IntEnum

from rich.console import Console, RenderableType
from rich.text import Text


class Verbosity(IntEnum):
    """Output levels, ordered from quietest to chattiest."""

    SILENT = 0
    COMPACT = 1
    NORMAL = 2


# Rich styles for the kinds of lines stages emit.
STYLE_SUCCESS = "bold green"
STYLE_ERROR = "bold red"
STYLE_WARNING = "yellow"
STYLE_KNOWN = "green"
STYLE_UNKNOWN = "magenta"
STYLE_HEADER = "bold cyan"
STYLE_DIM = "dim"


@dataclass
class _Pending:
    level: Verbosity
    text: RenderableType


@dataclass
class OutputSink:
    """Verbosity-aware wrapper around a Rich console.

    Attributes:
        console: Destination console. Colour is controlled on the console
            itself (``no_color``).
        verbosity: Minimum level a line needs to be shown.
    """

    console: Console
    verbosity: Verbosity = Verbosity.NORMAL
    _pending: list[_Pending] | None = field(default=None, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def silent(self) -> bool:
        return self.verbosity is Verbosity.SILENT

    @property
    def compact(self) -> bool:
        return self.verbosity is Verbosity.COMPACT

    def _emit(self, level: Verbosity, text: RenderableType, style: str | None) -> None:
        if self.verbosity < level:
            return
        if isinstance(text, str):
            text = Text(text, style=style or "")
        if self._pending is not None:
            self._pending.append(_Pending(level, text))
            return
        with self._lock:
            self.console.print(text, soft_wrap=True, highlight=False)

    def detail(self, text: RenderableType, style: str | None = None) -> None:
        """Per-line detail, shown only in NORMAL mode."""
        self._emit(Verbosity.NORMAL, text, style)

    def header(self, text: str) -> None:
        self._emit(Verbosity.NORMAL, text, STYLE_HEADER)

    def status(self, text: RenderableType, style: str | None = None) -> None:
        """Verdict lines, shown in NORMAL and COMPACT modes."""
        self._emit(Verbosity.COMPACT, text, style)

    def warning(self, text: str) -> None:
        self._emit(Verbosity.COMPACT, f"Warning: {text}", STYLE_WARNING)

    def buffer(self) -> OutputSink:
        """Return a child sink that holds its lines until ``flush()``."""
        return OutputSink(console=self.console, verbosity=self.verbosity, _pending=[])

    def flush(self, child: OutputSink) -> None:
        """Print everything a buffered child collected, atomically."""
        pending = child._pending or []
        with self._lock:
            for item in pending:
                self.console.print(item.text, soft_wrap=True, highlight=False)
        child._pending = []


def make_console(*, color: bool = True, silent: bool = False) -> Console:
    """Create the Rich console used for a run."""
    return Console(no_color=not color, quiet=silent, highlight=False, soft_wrap=True)
