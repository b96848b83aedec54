"""Audit configuration record threaded through every audit component."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .category import ResourceCategory

REPORT_FORMATS = ("table", "json", "csv")


@dataclass(frozen=True)
class AuditConfig:
    """Everything a run needs to know about where and what to audit.

    Attributes:
        categories: Categories to audit, in declared order
        profile: AWS profile name (None uses the default credential chain)
        region: Region for region-scoped categories
        output_root: Directory under which the run directory is created
        bundle: Zip the run directory after summarizing
        report_format: Report artifact format (table, json or csv)
        max_workers: Upper bound on concurrent provider queries
        reuse_collected_counts: Reuse successful collection counts in the digest
            instead of issuing an independent count query for those categories
    """

    categories: List[ResourceCategory] = field(default_factory=list)
    profile: Optional[str] = None
    region: str = "us-east-2"
    output_root: Path = Path(".")
    bundle: bool = False
    report_format: str = "table"
    max_workers: int = 4
    reuse_collected_counts: bool = False

    def __post_init__(self) -> None:
        if self.report_format not in REPORT_FORMATS:
            raise ValueError(f"Invalid report format '{self.report_format}'. Use one of: {', '.join(REPORT_FORMATS)}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")

    def region_for(self, category: ResourceCategory) -> Optional[str]:
        """Region to query a category in; None for global categories."""
        return None if category.is_global else self.region
