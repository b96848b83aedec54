"""Audit orchestrator.

Owns the run lifecycle: output location, per-category collection and reports,
count digest, manifest and optional bundle.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Optional

from ..models.audit_config import AuditConfig
from ..models.audit_run import AuditRun, CategoryResult, CategoryStatus, RunPhase, RunStatus
from ..models.category import ResourceCategory
from .bundle import bundle_directory
from .collector import ResourceCollector
from .errors import AuditLocationError, ReportWriteError
from .manifest import write_manifest
from .summary import SummaryAggregator
from .writer import ReportWriter

logger = logging.getLogger(__name__)


class AuditOrchestrator:
    """Runs one audit end to end.

    Per-category failures are recorded in the run and never abort it; only
    location errors (the run directory, digest, manifest or bundle cannot be
    written) are fatal and raised as AuditLocationError.

    Attributes:
        config: Audit configuration record
        collector: Collector used for full listings
        writer: Report writer for per-category artifacts
        aggregator: Summary aggregator for the count digest
    """

    def __init__(
        self,
        config: AuditConfig,
        collector: Optional[ResourceCollector] = None,
        writer: Optional[ReportWriter] = None,
        aggregator: Optional[SummaryAggregator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Audit configuration record
            collector: Collector (default: ResourceCollector())
            writer: Report writer (default: ReportWriter(config.report_format))
            aggregator: Summary aggregator (default: one sharing the collector)
            clock: Returns the current time; the run id is derived from it
        """
        self.config = config
        self.collector = collector or ResourceCollector()
        self.writer = writer or ReportWriter(config.report_format)
        self.aggregator = aggregator or SummaryAggregator(self.collector)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def run(self) -> AuditRun:
        """Execute the audit.

        Returns:
            Completed AuditRun with status SUCCESS or PARTIAL

        Raises:
            AuditLocationError: If the output location cannot be created or written
        """
        run = self._initialize()
        try:
            self._collect(run)
            self._summarize(run)
            self._bundle(run)
        except AuditLocationError:
            run.fail()
            logger.error(f"Audit run {run.run_id} failed during {run.phase.value}")
            raise
        except Exception:
            run.fail()
            logger.exception(f"Audit run {run.run_id} aborted during {run.phase.value}")
            raise

        status = run.complete(self.clock())
        if status == RunStatus.PARTIAL:
            logger.warning(
                f"Audit run {run.run_id} completed with {len(run.failed_results)} collection failures "
                f"and {len(run.unavailable_entries)} unavailable counts"
            )
        else:
            logger.info(f"Audit run {run.run_id} completed successfully")
        return run

    def _initialize(self) -> AuditRun:
        run = AuditRun.create(
            output_root=self.config.output_root,
            created_at=self.clock(),
            profile=self.config.profile,
            region=self.config.region,
        )
        logger.info(f"Starting audit run {run.run_id} ({len(self.config.categories)} categories)")
        try:
            # exist_ok=False: a run never writes into another run's directory
            run.output_dir.mkdir(parents=True, exist_ok=False)
        except OSError as e:
            run.fail()
            message = f"Cannot create output directory {run.output_dir}: {e}"
            raise AuditLocationError(message, path=run.output_dir) from e
        return run

    def _collect(self, run: AuditRun) -> None:
        run.advance(RunPhase.COLLECTING)
        categories = self.config.categories
        if not categories:
            run.set_results([])
            return

        workers = min(self.config.max_workers, len(categories))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self._collect_category, category, run) for category in categories]
            results = [future.result() for future in futures]
        run.set_results(results)

    def _collect_category(self, category: ResourceCategory, run: AuditRun) -> CategoryResult:
        """Collect one category and write its artifact."""
        result = self.collector.collect(category, self.config)
        try:
            if result.succeeded:
                result.artifact_path = self.writer.write(category, result.records, run.output_dir)
            else:
                error = result.error or "unknown error"
                result.artifact_path = self.writer.write_failure(category, error, run.output_dir)
        except ReportWriteError as e:
            logger.error(str(e))
            if result.succeeded:
                result.status = CategoryStatus.WRITE_FAILED
                result.error = e.reason
            else:
                result.error = f"{result.error}; {e.reason}"
        return result

    def _summarize(self, run: AuditRun) -> None:
        run.advance(RunPhase.SUMMARIZING)
        collected = {result.category: result for result in run.results}
        entries = self.aggregator.summarize(self.config.categories, self.config, collected=collected)
        run.set_summary(entries)
        run.digest_path = self.aggregator.write_digest(run, entries)
        write_manifest(run)

    def _bundle(self, run: AuditRun) -> None:
        run.advance(RunPhase.BUNDLING)
        if not self.config.bundle:
            return
        run.bundle_path = bundle_directory(run.output_dir)
