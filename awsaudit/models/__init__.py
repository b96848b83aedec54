"""Data models for audit runs and resource categories."""

from __future__ import annotations

from .audit_config import AuditConfig
from .audit_run import AuditRun, CategoryResult, CategoryStatus, RunPhase, RunStatus, SummaryEntry
from .category import OutputFormat, ResourceCategory, ResourceRecord

__all__ = [
    "AuditConfig",
    "AuditRun",
    "CategoryResult",
    "CategoryStatus",
    "OutputFormat",
    "ResourceCategory",
    "ResourceRecord",
    "RunPhase",
    "RunStatus",
    "SummaryEntry",
]
