"""ChecksumManifest: the count-and-digest record decoded from a head trailer."""

from __future__ import annotations

from dataclasses import dataclass

# Placeholder for a digest the trailer did not have room for.
# It is displayed but never equals a computed digest.
EMPTY_DIGEST = ""


@dataclass(frozen=True)
class ChecksumManifest:
    """Expected part count and part digests declared by an installer head.

    Attributes:
        count: Declared number of part files (0..99).
        digests: One entry per declared part, part 01 first. Each entry is a
            32-character lowercase hex string or ``EMPTY_DIGEST``.
    """

    count: int
    digests: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if len(self.digests) != self.count:
            raise ValueError(
                f"manifest declares {self.count} parts but carries "
                f"{len(self.digests)} digests"
            )

    @property
    def known_digests(self) -> frozenset[str]:
        """Digests usable for matching (EMPTY entries excluded)."""
        return frozenset(d for d in self.digests if d != EMPTY_DIGEST)

    def contains(self, digest: str) -> bool:
        """True if ``digest`` equals any declared digest, in any position."""
        return digest.lower() in self.known_digests
