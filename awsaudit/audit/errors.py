"""Audit error taxonomy."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class AuditError(Exception):
    """Base class for audit errors."""


class AuditLocationError(AuditError):
    """The run's output location could not be created or written.

    Fatal: nothing downstream is meaningful without the output location.
    """

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class ReportWriteError(AuditError):
    """A category report artifact could not be written."""

    def __init__(self, category: str, path: Path, reason: str) -> None:
        super().__init__(f"Failed to write report for {category} to {path}: {reason}")
        self.category = category
        self.path = path
        self.reason = reason


class UnknownCategoryError(AuditError, ValueError):
    """A configured category name is not in the catalog."""
