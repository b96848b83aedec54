"""Zip bundling of a run directory."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Optional

from .errors import AuditLocationError

logger = logging.getLogger(__name__)


def bundle_directory(directory: Path, archive_path: Optional[Path] = None) -> Path:
    """Zip a run directory.

    Entries are stored relative to the directory's parent, so extracting the
    archive recreates the run directory itself.

    Args:
        directory: Run directory to bundle
        archive_path: Output archive (default: <directory>.zip beside it)

    Returns:
        Path of the created archive

    Raises:
        AuditLocationError: If the directory is missing or the archive cannot be written
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise AuditLocationError(f"Cannot bundle {directory}: not a directory", path=directory)

    archive_path = Path(archive_path) if archive_path else directory.with_name(f"{directory.name}.zip")
    try:
        with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED) as zf:
            zf.write(directory, directory.name)
            for entry in sorted(directory.rglob("*")):
                zf.write(entry, str(entry.relative_to(directory.parent)))
    except OSError as e:
        raise AuditLocationError(f"Failed to write bundle {archive_path}: {e}", path=archive_path) from e

    logger.info(f"Bundled {directory} into {archive_path}")
    return archive_path
