"""Invocation of the external tools the pipeline delegates to.

Two third-party programs do the heavy lifting:

- ``osslsigncode`` verifies Authenticode signatures on installer heads.
- ``innoextract`` lists and test-extracts the Inno Setup payload.

Both are treated as black boxes: an argument vector goes in, combined
stdout/stderr text and an exit status come out. Stages receive a
``ToolRunner`` callable so tests can substitute canned results.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable, Sequence

from setupverify.exceptions import ToolNotFoundError

logger = logging.getLogger(__name__)

SIGNATURE_TOOL = "osslsigncode"
EXTRACTOR_TOOL = "innoextract"

# Where to obtain each tool, shown when it is missing.
TOOL_SOURCES: dict[str, str] = {
    SIGNATURE_TOOL: "https://github.com/mtrojnar/osslsigncode",
    EXTRACTOR_TOOL: "https://constexpr.org/innoextract/",
}

# Backends innoextract --gog needs for RAR-format parts.
RAR_BACKENDS: tuple[str, ...] = ("unrar", "unar")


@dataclass(frozen=True)
class ToolResult:
    """Captured result of one external tool run.

    Attributes:
        returncode: Process exit status (-1 if the process never finished).
        output: Combined stdout and stderr, decoded leniently.
        timed_out: True if the process was killed after the timeout.
    """

    returncode: int
    output: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


ToolRunner = Callable[[Sequence[str], float | None], ToolResult]


def run_tool(argv: Sequence[str], timeout: float | None = None) -> ToolResult:
    """Run an external tool and capture its combined output.

    Args:
        argv: Program and arguments.
        timeout: Seconds before the process is killed. None waits forever.

    Returns:
        A ``ToolResult``. Timeouts and launch failures are reported in the
        result rather than raised, so a single stuck installer never aborts
        the run.
    """
    logger.debug("Running: %s", " ".join(argv))
    try:
        proc = subprocess.run(
            list(argv),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        logger.warning("Timed out after %ss: %s", timeout, argv[0])
        partial = exc.output or b""
        return ToolResult(
            returncode=-1,
            output=partial.decode("utf-8", errors="replace"),
            timed_out=True,
        )
    except OSError as exc:
        logger.warning("Could not launch %s: %s", argv[0], exc)
        return ToolResult(returncode=-1, output=str(exc))
    return ToolResult(
        returncode=proc.returncode,
        output=proc.stdout.decode("utf-8", errors="replace"),
    )


def require_tool(tool: str, which: Callable[[str], str | None] = shutil.which) -> str:
    """Resolve a required tool on PATH.

    Args:
        tool: Executable name or path.
        which: Lookup function (``shutil.which`` unless testing).

    Returns:
        The resolved executable path.

    Raises:
        ToolNotFoundError: If the tool is not installed.
    """
    resolved = which(tool)
    if resolved is None:
        source = TOOL_SOURCES.get(tool, TOOL_SOURCES.get(_basename(tool), "your package manager"))
        raise ToolNotFoundError(tool, source)
    return resolved


def rar_backend_available(which: Callable[[str], str | None] = shutil.which) -> bool:
    """True if innoextract can unpack RAR-format parts on this system."""
    return any(which(name) for name in RAR_BACKENDS)


def _basename(tool: str) -> str:
    return tool.replace("\\", "/").rsplit("/", 1)[-1]
