"""ChecksumVerifier: compare the manifest a head declares with its parts.

Matching is by set membership: a part passes when its digest equals ANY
declared digest. The head does not promise that parts and digests line up
one-to-one, only that every shipped part is accounted for. The declared
count is then checked separately against the number of parts found.

Head-level failures:

- no manifest, but parts exist  -> ``manifest_missing_parts_exist``
- manifest declares 00, parts exist -> ``spurious_parts``
- neither of the above applies when the first part is a RAR archive: such
  heads never record part checksums, so the stage is skipped and the head
  is flagged as RAR
- parts found != declared count -> ``wrong_part_count``
"""

from __future__ import annotations

import logging
from typing import Callable

from setupverify.core.checksum.digest import file_digest
from setupverify.core.extraction.rar import is_rar_file
from setupverify.core.models import (
    CheckOutcome,
    ErrorCode,
    InstallerHead,
    Stage,
    StageResult,
)
from setupverify.core.sink import STYLE_DIM, STYLE_ERROR, STYLE_SUCCESS, OutputSink
from setupverify.core.trailer import (
    EMPTY_DIGEST,
    ChecksumManifest,
    read_manifest,
)
from setupverify.core.trailer.parser import DEFAULT_WINDOW
from setupverify.exceptions import TrailerError

logger = logging.getLogger(__name__)


class ChecksumVerifier:
    """Checks the part files of an installer head against its trailer.

    Args:
        compute_digests: Hash every part and match it against the manifest.
            When False only presence and count are checked.
        window: Trailer search window passed to ``read_manifest``.
        digest: Digest function, ``file_digest`` unless testing.

    Usage::

        verifier = ChecksumVerifier()
        result = verifier.verify(head, sink)
        if not result.passed:
            ...
    """

    def __init__(
        self,
        *,
        compute_digests: bool = True,
        window: int = DEFAULT_WINDOW,
        digest: Callable = file_digest,
    ) -> None:
        self.compute_digests = compute_digests
        self.window = window
        self._digest = digest

    def verify(self, head: InstallerHead, sink: OutputSink) -> StageResult:
        """Read the head's trailer and reconcile it with the parts on disk."""
        try:
            manifest = read_manifest(head.path, self.window)
        except TrailerError as exc:
            result = StageResult(Stage.CHECKSUM)
            result.outcomes.append(
                CheckOutcome.failed(head.name, ErrorCode.MALFORMED_MANIFEST, str(exc))
            )
            return result
        except OSError as exc:
            logger.warning("Cannot read %s: %s", head.path, exc)
            result = StageResult(Stage.CHECKSUM)
            result.outcomes.append(
                CheckOutcome.failed(
                    head.name, ErrorCode.MALFORMED_MANIFEST, f"cannot read head: {exc}"
                )
            )
            return result
        return self.reconcile(head, manifest, sink)

    def reconcile(
        self,
        head: InstallerHead,
        manifest: ChecksumManifest | None,
        sink: OutputSink,
    ) -> StageResult:
        """Compare an already decoded manifest with the head's parts."""
        result = StageResult(Stage.CHECKSUM)
        parts = head.parts

        if manifest is None:
            self._reconcile_without_manifest(head, result, sink)
            return result

        sink.detail(f"Declared bin files: {manifest.count:02d}, found: {len(parts)}")
        if manifest.count == 0:
            if parts and self._skip_rar_parts(head, result, sink):
                return result
            if parts:
                names = ", ".join(p.name for p in parts)
                result.outcomes.append(
                    CheckOutcome.failed(head.name, ErrorCode.SPURIOUS_PARTS, names)
                )
            else:
                result.outcomes.append(CheckOutcome.passed(head.name, "no bin files expected"))
            return result

        for ordinal, expected in enumerate(manifest.digests, start=1):
            shown = expected if expected != EMPTY_DIGEST else "(empty)"
            sink.detail(f"  expected {ordinal:02d}: {shown}", STYLE_DIM)

        for part in parts:
            result.outcomes.append(self._check_part(part, manifest, sink))

        if len(parts) != manifest.count:
            result.outcomes.append(
                CheckOutcome.failed(
                    head.name,
                    ErrorCode.WRONG_PART_COUNT,
                    f"expected {manifest.count}, found {len(parts)}",
                )
            )
        return result

    def _reconcile_without_manifest(
        self, head: InstallerHead, result: StageResult, sink: OutputSink,
    ) -> None:
        if not head.parts:
            sink.detail("No checksum manifest and no bin files.")
            result.outcomes.append(CheckOutcome.passed(head.name, "no bin files"))
            return

        if self._skip_rar_parts(head, result, sink):
            return

        result.outcomes.append(
            CheckOutcome.failed(
                head.name,
                ErrorCode.MANIFEST_MISSING_PARTS_EXIST,
                f"{len(head.parts)} bin file(s) but no checksum manifest",
            )
        )

    @staticmethod
    def _skip_rar_parts(head: InstallerHead, result: StageResult, sink: OutputSink) -> bool:
        """Mark ``result`` skipped if the head ships RAR-format parts.

        Such heads never record part checksums, whether the trailer is
        absent or declares 00.
        """
        first = head.first_part
        if first is None or not is_rar_file(first.path):
            return False
        sink.detail("RAR-format bin files: their checksums are not recorded in the installer.")
        result.has_rar_parts = True
        result.outcomes.append(
            CheckOutcome.skipped(head.name, "RAR-format bin files carry no checksums")
        )
        return True

    def _check_part(self, part, manifest: ChecksumManifest, sink: OutputSink) -> CheckOutcome:
        if not self.compute_digests:
            sink.detail(f"  {part.name}: present")
            return CheckOutcome.passed(part.name, "present")

        try:
            actual = self._digest(part.path)
        except OSError as exc:
            logger.warning("Cannot read %s: %s", part.path, exc)
            sink.detail(f"  {part.name}: unreadable", STYLE_ERROR)
            return CheckOutcome.failed(part.name, ErrorCode.WRONG_CHECKSUM, f"unreadable: {exc}")

        if manifest.contains(actual):
            sink.detail(f"  {part.name}: {actual} OK", STYLE_SUCCESS)
            return CheckOutcome.passed(part.name, actual)
        sink.detail(f"  {part.name}: {actual} MISMATCH", STYLE_ERROR)
        return CheckOutcome.failed(
            part.name, ErrorCode.WRONG_CHECKSUM, f"{part.name}: {actual} not in manifest"
        )
