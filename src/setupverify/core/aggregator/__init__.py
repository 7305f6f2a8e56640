"""Aggregation of per-installer stage results into one verdict.

Submodules
----------
- ``report``: AggregateReport, ErrorRecord, Diagnostic.
- ``summary``: End-of-run rendering.
- ``engine``: The ResultAggregator driving all stages.

All public names are re-exported here::

    from setupverify.core.aggregator import ResultAggregator, AggregateReport
"""

from setupverify.core.aggregator.engine import ResultAggregator, VerifyOptions
from setupverify.core.aggregator.report import AggregateReport, Diagnostic, ErrorRecord
from setupverify.core.aggregator.summary import render_summary

__all__ = [
    "AggregateReport",
    "Diagnostic",
    "ErrorRecord",
    "ResultAggregator",
    "VerifyOptions",
    "render_summary",
]
