"""Shared fixtures for setupverify tests.

Provides builders for synthetic installer heads (binary body followed by a
checksum trailer), their part files, a capturing output sink, and a fake
external-tool runner so no test needs osslsigncode or innoextract.
"""

from __future__ import annotations

import hashlib
import io
from pathlib import Path
from typing import Callable, Sequence

import pytest
from rich.console import Console

from setupverify.core.sink import OutputSink, Verbosity
from setupverify.core.tools import ToolResult

MARKER = b"#GOGCRCSTRING"

# Binary filler that looks like the start of a PE file.
HEAD_BODY = b"MZ\x90\x00\x03\x00\x00\x00" + bytes(range(256)) * 8


def md5_hex(content: bytes) -> str:
    return hashlib.md5(content).hexdigest()


def trailer_bytes(digests: Sequence[str], count: int | None = None) -> bytes:
    """Encode a checksum trailer: digests, 2-digit count, marker."""
    declared = len(digests) if count is None else count
    return "".join(digests).encode("ascii") + f"{declared:02d}".encode("ascii") + MARKER


@pytest.fixture
def build_trailer() -> Callable[..., bytes]:
    """Return the trailer encoder."""
    return trailer_bytes


@pytest.fixture
def digest_of() -> Callable[[bytes], str]:
    """Return the MD5 hex helper."""
    return md5_hex


@pytest.fixture
def make_installer(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a head and its parts into a directory.

    Args (of the returned callable):
        name: Head base name (``<name>.exe``, ``<name>-NN.bin``).
        parts: Contents of the part files, written as -01, -02, ...
        declared: Digests written into the trailer. Defaults to the MD5 of
            each part, in order.
        trailer: Write a trailer at all.
        count: Override the declared count field.
        directory: Target directory (default: ``tmp_path``).
    """

    def _make(
        name: str = "setup_game",
        parts: Sequence[bytes] = (),
        declared: Sequence[str] | None = None,
        trailer: bool = True,
        count: int | None = None,
        directory: Path | None = None,
    ) -> Path:
        target = directory or tmp_path
        target.mkdir(parents=True, exist_ok=True)
        for ordinal, content in enumerate(parts, start=1):
            (target / f"{name}-{ordinal:02d}.bin").write_bytes(content)
        digests = list(declared) if declared is not None else [md5_hex(c) for c in parts]
        body = HEAD_BODY
        if trailer:
            body += trailer_bytes(digests, count)
        head = target / f"{name}.exe"
        head.write_bytes(body)
        return head

    return _make


@pytest.fixture
def console_buffer() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def sink(console_buffer: io.StringIO) -> OutputSink:
    """An uncoloured NORMAL-verbosity sink writing into ``console_buffer``."""
    console = Console(file=console_buffer, width=200, no_color=True, highlight=False)
    return OutputSink(console=console, verbosity=Verbosity.NORMAL)


class FakeRunner:
    """Stand-in for ``run_tool`` returning canned results.

    Results are chosen by the first argument after the program name that
    appears in ``responses`` (e.g. ``"verify"``, ``"--list"``,
    ``"--test"``). Every call is recorded in ``calls``.
    """

    def __init__(self, responses: dict[str, ToolResult] | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[list[str]] = []

    def __call__(self, argv: Sequence[str], timeout: float | None = None) -> ToolResult:
        self.calls.append(list(argv))
        for arg in argv[1:]:
            if arg in self.responses:
                return self.responses[arg]
        return ToolResult(returncode=0, output="")


@pytest.fixture
def fake_runner() -> Callable[..., FakeRunner]:
    """Factory for FakeRunner instances."""
    return FakeRunner
