"""CLI configuration loading.

Precedence, lowest to highest: built-in defaults, YAML config file,
environment variables, command-line options.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..audit.catalog import resolve_categories
from ..models.audit_config import REPORT_FORMATS, AuditConfig

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "AWS_AUDIT_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".awsaudit" / "config.yaml"

_TRUE_VALUES = ("1", "true", "yes", "on")


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


@dataclass
class Config:
    """Configuration for the awsaudit CLI.

    Attributes:
        aws_profile: AWS profile name
        region: Region for region-scoped categories
        categories: Category names to audit (empty means all)
        output_dir: Directory under which run directories are created
        bundle: Zip the run directory when the audit completes
        report_format: Report artifact format (table, json or csv)
        max_workers: Concurrent provider queries
        reuse_collected_counts: Reuse successful collection counts in the digest
        log_level: Default log level when neither --verbose nor --quiet is given
    """

    aws_profile: Optional[str] = None
    region: str = "us-east-2"
    categories: List[str] = field(default_factory=list)
    output_dir: str = "."
    bundle: bool = False
    report_format: str = "table"
    max_workers: int = 4
    reuse_collected_counts: bool = False
    log_level: str = "WARNING"

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load configuration from the config file and environment.

        Args:
            path: Config file path (default: $AWS_AUDIT_CONFIG or ~/.awsaudit/config.yaml)

        Returns:
            Config instance

        Raises:
            ValueError: If the config file is malformed or holds invalid values
        """
        config = cls()
        config_path = Path(path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)
        if config_path.exists():
            config.apply(cls._read_file(config_path))
            logger.debug(f"Loaded configuration from {config_path}")
        config.apply_env(os.environ)
        config.validate()
        return config

    @staticmethod
    def _read_file(path: Path) -> Dict[str, Any]:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return data

    def apply(self, values: Dict[str, Any]) -> None:
        """Override settings from a mapping (config file keys match attribute names)."""
        for key, value in values.items():
            if value is None:
                continue
            if key == "profile":
                key = "aws_profile"
            if not hasattr(self, key):
                logger.warning(f"Ignoring unknown configuration key: {key}")
                continue
            if key in ("bundle", "reuse_collected_counts"):
                value = _parse_bool(value)
            elif key == "max_workers":
                value = int(value)
            elif key == "categories":
                value = [value] if isinstance(value, str) else list(value)
            setattr(self, key, value)

    def apply_env(self, environ: Any) -> None:
        """Override settings from environment variables."""
        profile = environ.get("AWS_PROFILE")
        region = environ.get("AWS_REGION") or environ.get("AWS_DEFAULT_REGION")
        if profile:
            self.aws_profile = profile
        if region:
            self.region = region
        if environ.get("AWS_AUDIT_OUTPUT_DIR"):
            self.output_dir = environ["AWS_AUDIT_OUTPUT_DIR"]
        if environ.get("AWS_AUDIT_BUNDLE"):
            self.bundle = _parse_bool(environ["AWS_AUDIT_BUNDLE"])
        if environ.get("AWS_AUDIT_LOG_LEVEL"):
            self.log_level = environ["AWS_AUDIT_LOG_LEVEL"].upper()

    def validate(self) -> bool:
        """Validate configuration values.

        Returns:
            True if valid, raises ValueError if invalid
        """
        if self.report_format not in REPORT_FORMATS:
            raise ValueError(f"Invalid report format '{self.report_format}'. Use one of: {', '.join(REPORT_FORMATS)}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
        return True

    def to_audit_config(self) -> AuditConfig:
        """Build the audit configuration record.

        Raises:
            UnknownCategoryError: If a configured category is not in the catalog
        """
        return AuditConfig(
            categories=resolve_categories(self.categories),
            profile=self.aws_profile,
            region=self.region,
            output_root=Path(self.output_dir),
            bundle=self.bundle,
            report_format=self.report_format,
            max_workers=self.max_workers,
            reuse_collected_counts=self.reuse_collected_counts,
        )
