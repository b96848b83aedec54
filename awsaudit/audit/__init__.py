"""Audit pipeline: collection, reports, count digest and bundling.

Classes:
    ResourceCollector: Read-only listing query for one category
    ReportWriter: Per-category report artifacts
    SummaryAggregator: Independent count digest
    AuditOrchestrator: Run lifecycle owner
"""

from __future__ import annotations

from .collector import ResourceCollector
from .orchestrator import AuditOrchestrator
from .summary import SummaryAggregator
from .writer import ReportWriter

__all__ = [
    "ResourceCollector",
    "ReportWriter",
    "SummaryAggregator",
    "AuditOrchestrator",
]
