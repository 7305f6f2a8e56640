"""Reconciliation of a head's checksum manifest with its part files on disk.

Submodules
----------
- ``digest``: Streaming MD5 of part files.
- ``verifier``: The ChecksumVerifier stage.

All public names are re-exported here::

    from setupverify.core.checksum import ChecksumVerifier, file_digest
"""

from setupverify.core.checksum.digest import file_digest
from setupverify.core.checksum.verifier import ChecksumVerifier

__all__ = [
    "ChecksumVerifier",
    "file_digest",
]
