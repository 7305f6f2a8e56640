"""Payload verification through the external extractor.

Submodules
----------
- ``rar``: RAR container detection for part files.
- ``probe``: Parsing of the extractor's file listing.
- ``verifier``: The ExtractionVerifier stage.

All public names are re-exported here::

    from setupverify.core.extraction import ExtractionVerifier, ProbeSummary
"""

from setupverify.core.extraction.probe import ProbeSummary, parse_listing
from setupverify.core.extraction.rar import is_rar_file
from setupverify.core.extraction.verifier import ExtractionVerifier

__all__ = [
    "ExtractionVerifier",
    "ProbeSummary",
    "is_rar_file",
    "parse_listing",
]
