"""Tests for the SignatureClassifier stage.

Verifies:
    - Verdicts for valid, tampered, unsigned and timed-out heads.
    - The missing-signature phrase wins over a zero exit status.
    - Disagreement between exit status and markers becomes a diagnostic.
    - Noise suppression and unfiltered output.
    - The verifier command line.
"""

from __future__ import annotations

from pathlib import Path

from setupverify.core.models import ErrorCode, InstallerHead, Status
from setupverify.core.signature import KnownStrings, SignatureClassifier
from setupverify.core.tools import ToolResult

SUBJECT = "/C=PL/L=Warsaw/O=GOG Sp. z o.o./CN=GOG Sp. z o.o."

VALID_OUTPUT = f"""Current PE checksum   : 0059B2F1
Calculated PE checksum: 0059B2F1

Message digest algorithm  : SHA256
Current message digest    : 9F86D081884C7D659A2FEAA0C55AD015
Calculated message digest : 9F86D081884C7D659A2FEAA0C55AD015

Signature verification: ok

Number of signers: 1
\tSigner #0:
\t\tSubject: {SUBJECT}
\t\tIssuer : /C=US/O=Example CA/CN=Example Code Signing CA
\t\tSerial : 0A1B2C3D

Number of certificates: 3
Succeeded
"""

TAMPERED_OUTPUT = """Current message digest    : 9F86D081884C7D659A2FEAA0C55AD015
Calculated message digest : 0000D081884C7D659A2FEAA0C55AD015    MISMATCH!!!

Signature verification: failed

Failed
"""

UNSIGNED_OUTPUT = "No signature found.\n\n"


def _head() -> InstallerHead:
    return InstallerHead(path=Path("/installers/setup_game.exe"))


def _classifier(fake_runner, output: str, returncode: int = 0, **kwargs):
    runner = fake_runner({"verify": ToolResult(returncode=returncode, output=output)})
    known = KnownStrings.from_groups(subjects={"vendor": [SUBJECT]})
    return SignatureClassifier(known=known, runner=runner, **kwargs), runner


class TestVerdicts:
    """Pass/fail decisions."""

    def test_valid_signature_passes(self, fake_runner, sink) -> None:
        classifier, _ = _classifier(fake_runner, VALID_OUTPUT)
        result = classifier.verify(_head(), sink)
        assert result.passed
        assert result.outcomes[0].status is Status.PASSED
        assert result.notes == []

    def test_tampered_signature_fails(self, fake_runner, sink) -> None:
        classifier, _ = _classifier(fake_runner, TAMPERED_OUTPUT, returncode=1)
        result = classifier.verify(_head(), sink)
        assert [o.code for o in result.failures] == [ErrorCode.SIGNATURE_ERROR]
        assert result.notes == []

    def test_unsigned_with_failing_exit(self, fake_runner, sink) -> None:
        classifier, _ = _classifier(fake_runner, UNSIGNED_OUTPUT, returncode=1)
        result = classifier.verify(_head(), sink)
        assert [o.code for o in result.failures] == [ErrorCode.NO_SIGNATURE_FOUND]

    def test_unsigned_phrase_wins_over_zero_exit(self, fake_runner, sink) -> None:
        classifier, _ = _classifier(fake_runner, UNSIGNED_OUTPUT, returncode=0)
        result = classifier.verify(_head(), sink)
        assert [o.code for o in result.failures] == [ErrorCode.NO_SIGNATURE_FOUND]
        assert len(result.notes) == 1
        assert "exited with status 0" in result.notes[0]

    def test_nonzero_exit_without_markers_fails(self, fake_runner, sink) -> None:
        classifier, _ = _classifier(fake_runner, "Unexpected output\n", returncode=2)
        result = classifier.verify(_head(), sink)
        assert [o.code for o in result.failures] == [ErrorCode.SIGNATURE_ERROR]
        assert "exit status 2" in result.failures[0].reason

    def test_failure_marker_with_zero_exit_fails_and_notes(self, fake_runner, sink) -> None:
        classifier, _ = _classifier(fake_runner, TAMPERED_OUTPUT, returncode=0)
        result = classifier.verify(_head(), sink)
        assert [o.code for o in result.failures] == [ErrorCode.SIGNATURE_ERROR]
        assert result.notes

    def test_success_markers_with_nonzero_exit_noted(self, fake_runner, sink) -> None:
        classifier, _ = _classifier(fake_runner, VALID_OUTPUT, returncode=1)
        result = classifier.verify(_head(), sink)
        assert [o.code for o in result.failures] == [ErrorCode.SIGNATURE_ERROR]
        assert "reported success" in result.notes[0]

    def test_timeout(self, fake_runner, sink) -> None:
        runner = fake_runner({"verify": ToolResult(returncode=-1, output="", timed_out=True)})
        result = SignatureClassifier(runner=runner, timeout=5).verify(_head(), sink)
        assert [o.code for o in result.failures] == [ErrorCode.TOOL_TIMEOUT]


class TestOutput:
    """What the stage prints."""

    def test_known_subject_is_tagged(self, fake_runner, sink, console_buffer) -> None:
        classifier, _ = _classifier(fake_runner, VALID_OUTPUT)
        classifier.verify(_head(), sink)
        text = console_buffer.getvalue()
        assert f"Subject: {SUBJECT}  [known]" in text
        assert "[unknown]" in text

    def test_noise_suppressed_by_default(self, fake_runner, sink, console_buffer) -> None:
        classifier, _ = _classifier(fake_runner, VALID_OUTPUT)
        classifier.verify(_head(), sink)
        assert "Number of certificates" not in console_buffer.getvalue()

    def test_unfiltered_keeps_noise(self, fake_runner, sink, console_buffer) -> None:
        classifier, _ = _classifier(fake_runner, VALID_OUTPUT, unfiltered=True)
        classifier.verify(_head(), sink)
        assert "Number of certificates" in console_buffer.getvalue()


class TestCommand:
    def test_command_with_ca_bundle(self) -> None:
        classifier = SignatureClassifier(ca_bundle=Path("/etc/ssl/ca.pem"), tool="osslsigncode")
        assert classifier.command(_head()) == [
            "osslsigncode", "verify", "-CAfile", "/etc/ssl/ca.pem",
            "-in", str(Path("/installers/setup_game.exe")),
        ]

    def test_command_without_ca_bundle(self, fake_runner, sink) -> None:
        classifier, runner = _classifier(fake_runner, VALID_OUTPUT)
        classifier.verify(_head(), sink)
        assert "-CAfile" not in runner.calls[0]
