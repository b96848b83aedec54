"""Audit run model.

Represents one end-to-end audit execution with its per-category collection
results and its count digest.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .category import ResourceRecord

RUN_ID_FORMAT = "%Y%m%d_%H%M%S"
RUN_DIR_PREFIX = "aws_audit_"
UNAVAILABLE = "unavailable"


class RunPhase(Enum):
    """Audit run lifecycle phases, in execution order."""

    INITIALIZING = "initializing"
    COLLECTING = "collecting"
    SUMMARIZING = "summarizing"
    BUNDLING = "bundling"
    COMPLETED = "completed"


class RunStatus(Enum):
    """Overall run outcome."""

    RUNNING = "running"
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


class CategoryStatus(Enum):
    """Outcome of collecting and writing one category."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    WRITE_FAILED = "write-failed"


@dataclass
class CategoryResult:
    """Outcome of running the collector (and report writer) for one category.

    Attributes:
        category: Category name
        status: Collection/write outcome
        records: Projected records in provider order (empty on failure)
        error: Error description when status is not SUCCEEDED
        artifact_path: Report artifact written for this category, if any
    """

    category: str
    status: CategoryStatus
    records: List[ResourceRecord] = field(default_factory=list)
    error: Optional[str] = None
    artifact_path: Optional[Path] = None

    @classmethod
    def success(cls, category: str, records: List[ResourceRecord]) -> "CategoryResult":
        return cls(category=category, status=CategoryStatus.SUCCEEDED, records=list(records))

    @classmethod
    def failure(cls, category: str, error: str) -> "CategoryResult":
        return cls(category=category, status=CategoryStatus.FAILED, error=error)

    @property
    def succeeded(self) -> bool:
        return self.status == CategoryStatus.SUCCEEDED

    @property
    def record_count(self) -> Optional[int]:
        """Number of collected records, or None when the query failed."""
        if self.status == CategoryStatus.FAILED:
            return None
        return len(self.records)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "status": self.status.value,
            "record_count": self.record_count,
            "error": self.error,
            "artifact": self.artifact_path.name if self.artifact_path else None,
        }


@dataclass(frozen=True)
class SummaryEntry:
    """Count for one category in the digest.

    A count of ``None`` means the count query failed; it is rendered as
    "unavailable" and is never conflated with a real count of zero.
    """

    category: str
    title: str
    count: Optional[int] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.count is not None and self.count < 0:
            raise ValueError(f"Count for {self.category} must be non-negative, got {self.count}")

    @property
    def available(self) -> bool:
        return self.count is not None

    @property
    def display_count(self) -> str:
        return str(self.count) if self.count is not None else UNAVAILABLE

    def to_line(self) -> str:
        """Render the digest line for this entry."""
        return f"{self.title}: {self.display_count}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "title": self.title,
            "count": self.count,
            "error": self.error,
        }


@dataclass
class AuditRun:
    """One audit execution.

    The run id is derived from the creation timestamp and doubles as the name of
    the output directory. Results are appended as categories complete; once the
    run reaches the COMPLETED phase it no longer accepts changes.

    State transitions:
        initializing → collecting → summarizing → bundling → completed

    Attributes:
        run_id: Creation timestamp formatted as YYYYmmdd_HHMMSS
        created_at: When the run was created
        output_dir: Directory holding the run's artifacts
        profile: AWS profile used for the run
        region: AWS region used for region-scoped categories
        results: Category results in declared order
        summary: Digest entries in declared order
        phase: Current lifecycle phase
        status: Overall outcome
        digest_path: Path of the digest artifact once written
        bundle_path: Path of the zip bundle when bundling is enabled
        completed_at: When the run reached the COMPLETED phase
    """

    run_id: str
    created_at: datetime
    output_dir: Path
    profile: Optional[str] = None
    region: Optional[str] = None
    results: List[CategoryResult] = field(default_factory=list)
    summary: List[SummaryEntry] = field(default_factory=list)
    phase: RunPhase = RunPhase.INITIALIZING
    status: RunStatus = RunStatus.RUNNING
    digest_path: Optional[Path] = None
    bundle_path: Optional[Path] = None
    completed_at: Optional[datetime] = None

    @staticmethod
    def make_run_id(created_at: datetime) -> str:
        return created_at.strftime(RUN_ID_FORMAT)

    @classmethod
    def create(
        cls,
        output_root: Path,
        created_at: datetime,
        profile: Optional[str] = None,
        region: Optional[str] = None,
    ) -> "AuditRun":
        """Create a run whose output directory is named after its timestamp."""
        run_id = cls.make_run_id(created_at)
        return cls(
            run_id=run_id,
            created_at=created_at,
            output_dir=Path(output_root) / f"{RUN_DIR_PREFIX}{run_id}",
            profile=profile,
            region=region,
        )

    @property
    def is_completed(self) -> bool:
        return self.phase == RunPhase.COMPLETED

    @property
    def failed_results(self) -> List[CategoryResult]:
        return [r for r in self.results if not r.succeeded]

    @property
    def unavailable_entries(self) -> List[SummaryEntry]:
        return [e for e in self.summary if not e.available]

    def _ensure_mutable(self) -> None:
        if self.is_completed:
            raise RuntimeError(f"Audit run {self.run_id} is completed and can no longer be modified")

    def advance(self, phase: RunPhase) -> None:
        """Move the run to a later lifecycle phase."""
        self._ensure_mutable()
        order = list(RunPhase)
        if order.index(phase) < order.index(self.phase):
            raise ValueError(f"Cannot move run from {self.phase.value} back to {phase.value}")
        self.phase = phase

    def set_results(self, results: List[CategoryResult]) -> None:
        self._ensure_mutable()
        self.results = list(results)

    def set_summary(self, entries: List[SummaryEntry]) -> None:
        self._ensure_mutable()
        self.summary = list(entries)

    def derive_status(self) -> RunStatus:
        """Overall status implied by the recorded results and summary.

        SUCCESS only when every category succeeded in both collection and
        summarization; otherwise PARTIAL.
        """
        if self.failed_results or self.unavailable_entries:
            return RunStatus.PARTIAL
        return RunStatus.SUCCESS

    def complete(self, completed_at: datetime) -> RunStatus:
        """Finalize the run; no further changes are accepted afterwards."""
        self._ensure_mutable()
        self.status = self.derive_status()
        self.completed_at = completed_at
        self.phase = RunPhase.COMPLETED
        return self.status

    def fail(self) -> None:
        """Mark the run as failed after a fatal error."""
        self._ensure_mutable()
        self.status = RunStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "profile": self.profile,
            "region": self.region,
            "phase": self.phase.value,
            "status": self.status.value,
            "output_dir": str(self.output_dir),
            "digest": self.digest_path.name if self.digest_path else None,
            "bundle": str(self.bundle_path) if self.bundle_path else None,
            "results": [r.to_dict() for r in self.results],
            "summary": [e.to_dict() for e in self.summary],
        }
