"""setupverify: Signature, checksum and payload verification for multi-part installers."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
