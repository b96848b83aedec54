"""Run manifest stored in YAML beside the run's report artifacts."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import yaml

from ..models.audit_run import AuditRun
from .errors import AuditLocationError

MANIFEST_FILENAME = "run.yaml"
MANIFEST_VERSION = "1.0"


def write_manifest(run: AuditRun, path: Optional[Path] = None) -> Path:
    """Write the run manifest.

    Records each category's collection outcome, artifact and count.

    Args:
        run: Audit run with results and summary recorded
        path: Manifest path (default: <run dir>/run.yaml)

    Returns:
        Path of the written manifest

    Raises:
        AuditLocationError: If the manifest cannot be written
    """
    path = Path(path) if path else run.output_dir / MANIFEST_FILENAME
    data = {
        "metadata": {
            "version": MANIFEST_VERSION,
            "log_type": "resource_audit",
            "created_at": datetime.now(timezone.utc).isoformat(),
        },
        "run": {
            "run_id": run.run_id,
            "created_at": run.created_at.isoformat(),
            "profile": run.profile,
            "region": run.region,
            "status": run.derive_status().value,
        },
        "categories": [
            {
                **result.to_dict(),
                "count": entry.count,
                "count_error": entry.error,
            }
            for result, entry in zip(run.results, run.summary)
        ],
    }

    try:
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise AuditLocationError(f"Failed to write run manifest {path}: {e}", path=path) from e
    return path

