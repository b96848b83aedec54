"""Unit tests for CLI configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from awsaudit.audit.errors import UnknownCategoryError
from awsaudit.cli.config import Config

AUDIT_ENV_VARS = (
    "AWS_PROFILE",
    "AWS_REGION",
    "AWS_DEFAULT_REGION",
    "AWS_AUDIT_CONFIG",
    "AWS_AUDIT_OUTPUT_DIR",
    "AWS_AUDIT_BUNDLE",
    "AWS_AUDIT_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in AUDIT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestConfig:
    """Tests for Config."""

    def test_defaults_without_file(self, tmp_path: Path) -> None:
        config = Config.load(str(tmp_path / "missing.yaml"))

        assert config.aws_profile is None
        assert config.region == "us-east-2"
        assert config.categories == []
        assert config.bundle is False
        assert config.report_format == "table"
        assert config.max_workers == 4

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "profile: audit\n"
            "region: eu-west-1\n"
            "categories:\n"
            "  - vpcs\n"
            "  - s3_buckets\n"
            "bundle: yes\n"
            "report_format: json\n"
            "max_workers: 2\n"
        )

        config = Config.load(str(path))

        assert config.aws_profile == "audit"
        assert config.region == "eu-west-1"
        assert config.categories == ["vpcs", "s3_buckets"]
        assert config.bundle is True
        assert config.report_format == "json"
        assert config.max_workers == 2

    def test_config_path_from_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "audit.yaml"
        path.write_text("region: ap-southeast-2\n")
        monkeypatch.setenv("AWS_AUDIT_CONFIG", str(path))

        assert Config.load().region == "ap-southeast-2"

    def test_environment_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("profile: audit\nregion: eu-west-1\nbundle: false\n")
        monkeypatch.setenv("AWS_PROFILE", "ops")
        monkeypatch.setenv("AWS_DEFAULT_REGION", "us-west-2")
        monkeypatch.setenv("AWS_AUDIT_BUNDLE", "true")
        monkeypatch.setenv("AWS_AUDIT_OUTPUT_DIR", "/var/audits")
        monkeypatch.setenv("AWS_AUDIT_LOG_LEVEL", "info")

        config = Config.load(str(path))

        assert config.aws_profile == "ops"
        assert config.region == "us-west-2"
        assert config.bundle is True
        assert config.output_dir == "/var/audits"
        assert config.log_level == "INFO"

    def test_aws_region_preferred_over_default_region(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AWS_REGION", "eu-central-1")
        monkeypatch.setenv("AWS_DEFAULT_REGION", "us-west-2")

        assert Config.load(str(tmp_path / "missing.yaml")).region == "eu-central-1"

    def test_single_category_string(self) -> None:
        config = Config()
        config.apply({"categories": "vpcs"})

        assert config.categories == ["vpcs"]

    def test_unknown_keys_are_ignored(self) -> None:
        config = Config()
        config.apply({"colour": "blue"})

        assert not hasattr(config, "colour")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("region: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            Config.load(str(path))

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- vpcs\n")

        with pytest.raises(ValueError, match="must contain a mapping"):
            Config.load(str(path))

    def test_invalid_report_format(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("report_format: xml\n")

        with pytest.raises(ValueError, match="Invalid report format"):
            Config.load(str(path))

    def test_to_audit_config(self) -> None:
        config = Config(aws_profile="audit", region="eu-west-1", categories=["s3_buckets", "vpcs"], bundle=True)

        audit_config = config.to_audit_config()

        assert [c.name for c in audit_config.categories] == ["s3_buckets", "vpcs"]
        assert audit_config.profile == "audit"
        assert audit_config.region == "eu-west-1"
        assert audit_config.bundle is True
        assert audit_config.output_root == Path(".")

    def test_to_audit_config_all_categories(self) -> None:
        assert len(Config().to_audit_config().categories) == 9

    def test_to_audit_config_unknown_category(self) -> None:
        with pytest.raises(UnknownCategoryError):
            Config(categories=["lambda_functions"]).to_audit_config()
