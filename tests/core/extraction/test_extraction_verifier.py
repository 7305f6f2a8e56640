"""Tests for the ExtractionVerifier stage.

Verifies:
    - Probe failure aborts the stage with probe_failed.
    - Checksum info mismatch is reported but the stage continues.
    - RAR detection, --gog mode, and skipping without a RAR backend.
    - Probe-only mode and test extraction failures.
"""

from __future__ import annotations

from pathlib import Path

from setupverify.core.extraction import ExtractionVerifier, is_rar_file
from setupverify.core.models import ErrorCode
from setupverify.core.tools import ToolResult
from setupverify.discovery import InstallerScanner

GOOD_LISTING = ' - "app/game.dat" [100] md5:0cc175b9c0f1b6a831c399e269772661\n'
NO_CHECKSUM_LISTING = ' - "app/game.dat" [100]\n'
RAR_PART = b"Rar!\x1a\x07\x00" + b"\x00" * 32


def _head(path: Path):
    return InstallerScanner().find_heads([path])[0]


def _has_unrar(name: str) -> str | None:
    return "/usr/bin/unrar" if name == "unrar" else None


def _no_unrar(name: str) -> str | None:
    return None


class TestProbe:
    """Listing the payload."""

    def test_probe_failure_aborts(self, make_installer, sink, fake_runner) -> None:
        runner = fake_runner({"--list": ToolResult(returncode=1, output="Not a supported Inno Setup installer!")})
        result = ExtractionVerifier(runner=runner).verify(_head(make_installer()), sink)
        assert [o.code for o in result.failures] == [ErrorCode.PROBE_FAILED]
        assert len(runner.calls) == 1

    def test_probe_timeout(self, make_installer, sink, fake_runner) -> None:
        runner = fake_runner({"--list": ToolResult(returncode=-1, output="", timed_out=True)})
        result = ExtractionVerifier(runner=runner, timeout=1).verify(_head(make_installer()), sink)
        assert [o.code for o in result.failures] == [ErrorCode.TOOL_TIMEOUT]

    def test_checksum_info_mismatch_continues(self, make_installer, sink, fake_runner) -> None:
        runner = fake_runner({"--list": ToolResult(0, NO_CHECKSUM_LISTING)})
        result = ExtractionVerifier(runner=runner).verify(_head(make_installer()), sink)
        assert [o.code for o in result.failures] == [ErrorCode.CHECKSUM_INFO_MISMATCH]
        assert any("--test" in call for call in runner.calls)

    def test_probe_only_passes(self, make_installer, sink, fake_runner) -> None:
        runner = fake_runner({"--list": ToolResult(0, GOOD_LISTING)})
        verifier = ExtractionVerifier(runner=runner, test_extract=False)
        result = verifier.verify(_head(make_installer()), sink)
        assert result.passed
        assert len(runner.calls) == 1
        assert runner.calls[0][:4] == ["innoextract", "--list", "--list-sizes", "--list-checksums"]


class TestExtraction:
    """Full test extraction."""

    def test_success(self, make_installer, sink, fake_runner) -> None:
        runner = fake_runner({"--list": ToolResult(0, GOOD_LISTING)})
        result = ExtractionVerifier(runner=runner).verify(_head(make_installer()), sink)
        assert result.passed
        assert runner.calls[1][:2] == ["innoextract", "--test"]
        assert "--gog" not in runner.calls[1]

    def test_failure(self, make_installer, sink, fake_runner) -> None:
        runner = fake_runner({
            "--list": ToolResult(0, GOOD_LISTING),
            "--test": ToolResult(1, "Checksum mismatch:\n actual: md5 00\n"),
        })
        result = ExtractionVerifier(runner=runner).verify(_head(make_installer()), sink)
        assert [o.code for o in result.failures] == [ErrorCode.EXTRACTION_FAILED]


class TestRarParts:
    """RAR-format parts."""

    def test_rar_detected_and_gog_mode_used(self, make_installer, sink, fake_runner) -> None:
        runner = fake_runner({"--list": ToolResult(0, GOOD_LISTING)})
        head = _head(make_installer(parts=[RAR_PART], trailer=False))
        result = ExtractionVerifier(runner=runner, which=_has_unrar).verify(head, sink)
        assert result.passed
        assert result.has_rar_parts
        assert "--gog" in runner.calls[1]
        assert result.notes == []

    def test_rar_skipped_without_backend(self, make_installer, sink, fake_runner) -> None:
        runner = fake_runner({"--list": ToolResult(0, GOOD_LISTING)})
        head = _head(make_installer(parts=[RAR_PART], trailer=False))
        result = ExtractionVerifier(runner=runner, which=_no_unrar).verify(head, sink)
        assert result.passed
        assert "--gog" not in runner.calls[1]
        assert "no unrar/unar backend" in result.notes[0]

    def test_rar_mode_disabled(self, make_installer, sink, fake_runner, console_buffer) -> None:
        runner = fake_runner({"--list": ToolResult(0, GOOD_LISTING)})
        head = _head(make_installer(parts=[RAR_PART], trailer=False))
        verifier = ExtractionVerifier(runner=runner, rar_mode=False, which=_has_unrar)
        result = verifier.verify(head, sink)
        assert result.passed
        assert "--gog" not in runner.calls[1]
        assert "Warning: RAR bin files not extracted (disabled)" in console_buffer.getvalue()

    def test_plain_parts_are_not_rar(self, make_installer, sink, fake_runner) -> None:
        runner = fake_runner({"--list": ToolResult(0, GOOD_LISTING)})
        head = _head(make_installer(parts=[b"plain data"]))
        result = ExtractionVerifier(runner=runner, which=_has_unrar).verify(head, sink)
        assert not result.has_rar_parts


class TestIsRarFile:
    def test_rar4_and_rar5(self, tmp_path: Path) -> None:
        rar4 = tmp_path / "a.bin"
        rar4.write_bytes(b"Rar!\x1a\x07\x00rest")
        rar5 = tmp_path / "b.bin"
        rar5.write_bytes(b"Rar!\x1a\x07\x01\x00rest")
        assert is_rar_file(rar4)
        assert is_rar_file(rar5)

    def test_other_content(self, tmp_path: Path) -> None:
        other = tmp_path / "c.bin"
        other.write_bytes(b"PK\x03\x04")
        assert not is_rar_file(other)

    def test_missing_file(self, tmp_path: Path) -> None:
        assert not is_rar_file(tmp_path / "missing.bin")
