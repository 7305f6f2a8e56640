"""Classification of signature-verifier output.

Submodules
----------
- ``models``: LineKind, ClassifiedLine, KnownStrings.
- ``parsers``: Versioned, pluggable parsers of raw tool output.
- ``verifier``: The SignatureClassifier stage.

All public names are re-exported here::

    from setupverify.core.signature import SignatureClassifier, KnownStrings
"""

from setupverify.core.signature.models import ClassifiedLine, KnownStrings, LineKind
from setupverify.core.signature.parsers import (
    OsslsigncodeParser,
    SignatureOutputParser,
    default_parser,
)
from setupverify.core.signature.verifier import SignatureClassifier

__all__ = [
    "ClassifiedLine",
    "KnownStrings",
    "LineKind",
    "OsslsigncodeParser",
    "SignatureClassifier",
    "SignatureOutputParser",
    "default_parser",
]
