"""Per-category report artifacts (table, JSON, CSV)."""

from __future__ import annotations

import csv
import json
import logging
from io import StringIO
from pathlib import Path
from typing import Any, List

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..models.category import OutputFormat, ResourceCategory, ResourceRecord
from .errors import ReportWriteError

logger = logging.getLogger(__name__)

EXTENSIONS = {"table": "txt", "json": "json", "csv": "csv"}

# Wide enough that typical IDs, tags and descriptions are not wrapped.
TABLE_WIDTH = 240


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class ReportWriter:
    """Writes one report artifact per category into a run directory.

    An artifact is always written, including for empty or failed categories.
    """

    def __init__(self, report_format: str = "table") -> None:
        """Initialize the writer.

        Args:
            report_format: One of "table", "json" or "csv"
        """
        if report_format not in EXTENSIONS:
            raise ValueError(f"Unsupported report format: {report_format}")
        self.report_format = report_format

    def artifact_path(self, category: ResourceCategory, destination: Path) -> Path:
        """Deterministic artifact path for a category within a run directory."""
        return Path(destination) / f"{category.name}.{EXTENSIONS[self.report_format]}"

    def write(self, category: ResourceCategory, records: List[ResourceRecord], destination: Path) -> Path:
        """Write a category's records.

        Args:
            category: Category the records belong to
            records: Projected records in provider order
            destination: Run output directory

        Returns:
            Path of the written artifact

        Raises:
            ReportWriteError: If the artifact cannot be written
        """
        path = self.artifact_path(category, destination)
        if category.output_format == OutputFormat.COUNT:
            content = self._render_count(category, len(records))
        elif self.report_format == "json":
            content = self._render_json(category, records)
        elif self.report_format == "csv":
            content = self._render_csv(category.headers, [[format_cell(v) for v in r] for r in records])
        else:
            content = self._render_table(category, records)

        self._write_file(category, path, content)
        logger.debug(f"Wrote {len(records)} {category.name} records to {path}")
        return path

    def write_failure(self, category: ResourceCategory, error: str, destination: Path) -> Path:
        """Write an error-marked artifact for a category whose query failed.

        Raises:
            ReportWriteError: If the artifact cannot be written
        """
        path = self.artifact_path(category, destination)
        if self.report_format == "json":
            content = json.dumps({"category": category.name, "error": error}, indent=2) + "\n"
        elif self.report_format == "csv":
            content = self._render_csv(["error"], [[error]])
        else:
            content = f"{category.title}\nERROR: {error}\n"

        self._write_file(category, path, content)
        return path

    def _write_file(self, category: ResourceCategory, path: Path, content: str) -> None:
        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            raise ReportWriteError(category.name, path, str(e)) from e

    def _render_count(self, category: ResourceCategory, count: int) -> str:
        if self.report_format == "json":
            return json.dumps({"category": category.name, "count": count}, indent=2) + "\n"
        if self.report_format == "csv":
            return self._render_csv(["count"], [[str(count)]])
        return f"{category.title}: {count}\n"

    def _render_json(self, category: ResourceCategory, records: List[ResourceRecord]) -> str:
        headers = category.headers
        output = {
            "category": category.name,
            "fields": headers,
            "record_count": len(records),
            "records": [dict(zip(headers, record)) for record in records],
        }
        return json.dumps(output, indent=2, default=str) + "\n"

    def _render_csv(self, headers: List[str], rows: List[List[str]]) -> str:
        buffer = StringIO()
        writer = csv.writer(buffer)
        writer.writerow(headers)
        writer.writerows(rows)
        return buffer.getvalue()

    def _render_table(self, category: ResourceCategory, records: List[ResourceRecord]) -> str:
        table = Table(title=Text(category.title), box=box.ASCII, title_justify="left")
        for header in category.headers:
            table.add_column(header, overflow="fold")
        for record in records:
            # Text cells so provider values are never parsed as Rich markup
            table.add_row(*(Text(format_cell(value)) for value in record))

        console = Console(width=TABLE_WIDTH, color_system=None, force_terminal=False)
        with console.capture() as capture:
            console.print(table)
        return capture.get()
