"""Count digest across audit categories."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from rich.table import Table

from ..models.audit_config import AuditConfig
from ..models.audit_run import AuditRun, CategoryResult, SummaryEntry
from ..models.category import ResourceCategory
from .collector import ResourceCollector, describe_error
from .errors import AuditLocationError

logger = logging.getLogger(__name__)

DIGEST_FILENAME = "summary.txt"


class SummaryAggregator:
    """Builds the per-category count digest.

    Counts come from their own count-only queries, independent of collection.
    """

    def __init__(self, collector: Optional[ResourceCollector] = None) -> None:
        self.collector = collector or ResourceCollector()

    def _count_entry(self, category: ResourceCategory, config: AuditConfig) -> SummaryEntry:
        try:
            count = self.collector.count(category, config)
        except Exception as e:
            logger.error(f"Count query for {category.name} failed: {e}")
            return SummaryEntry(category=category.name, title=category.title, error=describe_error(e))
        return SummaryEntry(category=category.name, title=category.title, count=count)

    def summarize(
        self,
        categories: List[ResourceCategory],
        config: AuditConfig,
        collected: Optional[Dict[str, CategoryResult]] = None,
    ) -> List[SummaryEntry]:
        """Count every category.

        Args:
            categories: Categories in declared order
            config: Audit configuration (profile, region, concurrency)
            collected: Collection results by category name; their counts are
                reused only when config.reuse_collected_counts is set

        Returns:
            One SummaryEntry per category, in declared order
        """
        entries: List[Optional[SummaryEntry]] = [None] * len(categories)
        pending: Dict[int, ResourceCategory] = {}

        for index, category in enumerate(categories):
            result = (collected or {}).get(category.name)
            if config.reuse_collected_counts and result is not None and result.succeeded:
                entries[index] = SummaryEntry(category=category.name, title=category.title, count=result.record_count)
            else:
                pending[index] = category

        if pending:
            workers = min(config.max_workers, len(pending))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    index: executor.submit(self._count_entry, category, config) for index, category in pending.items()
                }
                for index, future in futures.items():
                    entries[index] = future.result()

        return [entry for entry in entries if entry is not None]

    def format_digest(self, run: AuditRun, entries: List[SummaryEntry], generated_at: Optional[datetime] = None) -> str:
        """Render the digest: a run header, a blank line, one line per category."""
        generated_at = generated_at or datetime.now(timezone.utc)
        lines = [
            f"AWS audit run {run.run_id}",
            f"Profile: {run.profile or 'default'}",
            f"Region: {run.region or 'n/a'}",
            f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S UTC')}",
            "",
        ]
        lines.extend(entry.to_line() for entry in entries)
        return "\n".join(lines) + "\n"

    def write_digest(self, run: AuditRun, entries: List[SummaryEntry], path: Optional[Path] = None) -> Path:
        """Write the digest artifact.

        Raises:
            AuditLocationError: If the digest cannot be written
        """
        path = Path(path) if path else run.output_dir / DIGEST_FILENAME
        try:
            path.write_text(self.format_digest(run, entries), encoding="utf-8")
        except OSError as e:
            raise AuditLocationError(f"Failed to write digest {path}: {e}", path=path) from e
        logger.info(f"Wrote digest for {len(entries)} categories to {path}")
        return path

    def render(self, entries: List[SummaryEntry], title: str = "Resource Counts") -> Table:
        """Build a Rich table of the digest for terminal display."""
        table = Table(title=title, show_header=True, header_style="bold magenta")
        table.add_column("Category", style="cyan")
        table.add_column("Count", justify="right")

        for entry in entries:
            count = str(entry.count) if entry.available else "[red]unavailable[/red]"
            table.add_row(entry.title, count)

        return table
