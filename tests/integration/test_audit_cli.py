"""Integration tests for the awsaudit CLI commands."""

from __future__ import annotations

import zipfile
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from awsaudit.audit.catalog import category_names
from awsaudit.aws.credentials import CredentialValidationError
from awsaudit.cli.main import app
from tests.fixtures.providers import FakeProvider, bucket_pages, client_error, instance_pages

IDENTITY = {"account_id": "123456789012", "arn": "arn:aws:iam::123456789012:user/auditor", "user_id": "AIDA"}


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the user's config file and AWS environment out of the tests."""
    for name in ("AWS_PROFILE", "AWS_REGION", "AWS_DEFAULT_REGION", "AWS_AUDIT_OUTPUT_DIR", "AWS_AUDIT_BUNDLE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AWS_AUDIT_CONFIG", str(tmp_path / "no-config.yaml"))


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider(
        {
            "ec2.describe_instances": instance_pages("i-1", "i-2", "i-3"),
            "s3.list_buckets": bucket_pages("logs", "assets"),
            "iam.list_users": client_error("AccessDenied", "Not authorized", "ListUsers"),
        }
    )


def run_dirs(root: Path) -> list:
    return sorted(p for p in root.glob("aws_audit_*") if p.is_dir())


class TestRunCommand:
    """Tests for `awsaudit run`."""

    def test_successful_run(self, runner: CliRunner, provider: FakeProvider, tmp_path: Path) -> None:
        out = tmp_path / "audits"
        with patch("awsaudit.audit.collector.create_boto_client", provider), patch(
            "awsaudit.cli.main.validate_credentials", return_value=IDENTITY
        ):
            result = runner.invoke(app, ["run", "-c", "ec2_instances", "-c", "s3_buckets", "-o", str(out)])

        assert result.exit_code == 0, result.stdout
        assert "123456789012" in result.stdout
        assert "success" in result.stdout

        dirs = run_dirs(out)
        assert len(dirs) == 1
        assert sorted(p.name for p in dirs[0].iterdir()) == [
            "ec2_instances.txt",
            "run.yaml",
            "s3_buckets.txt",
            "summary.txt",
        ]
        digest = (dirs[0] / "summary.txt").read_text()
        assert "EC2 instances: 3" in digest
        assert "S3 buckets: 2" in digest
        assert list(out.glob("*.zip")) == []

    def test_partial_run_exits_with_one(self, runner: CliRunner, provider: FakeProvider, tmp_path: Path) -> None:
        with patch("awsaudit.audit.collector.create_boto_client", provider), patch(
            "awsaudit.cli.main.validate_credentials", return_value=IDENTITY
        ):
            result = runner.invoke(app, ["run", "-c", "ec2_instances", "-c", "iam_users", "-o", str(tmp_path)])

        assert result.exit_code == 1
        assert "Collection failures" in result.stdout
        assert "iam_users" in result.stdout

        digest = (run_dirs(tmp_path)[0] / "summary.txt").read_text()
        assert "IAM users: unavailable" in digest

    def test_profile_and_region_are_threaded_to_clients(
        self, runner: CliRunner, provider: FakeProvider, tmp_path: Path
    ) -> None:
        with patch("awsaudit.audit.collector.create_boto_client", provider), patch(
            "awsaudit.cli.main.validate_credentials", return_value=IDENTITY
        ):
            runner.invoke(
                app,
                [
                    "--profile",
                    "audit",
                    "--region",
                    "eu-west-1",
                    "run",
                    "-c",
                    "ec2_instances",
                    "-c",
                    "s3_buckets",
                    "-o",
                    str(tmp_path),
                ],
            )

        assert ("ec2", "eu-west-1", "audit") in provider.calls
        assert ("s3", None, "audit") in provider.calls

    def test_bundle_and_json_format(self, runner: CliRunner, provider: FakeProvider, tmp_path: Path) -> None:
        with patch("awsaudit.audit.collector.create_boto_client", provider), patch(
            "awsaudit.cli.main.validate_credentials", return_value=IDENTITY
        ):
            result = runner.invoke(
                app, ["run", "-c", "s3_buckets", "--bundle", "--format", "json", "-o", str(tmp_path)]
            )

        assert result.exit_code == 0, result.stdout
        run_dir = run_dirs(tmp_path)[0]
        assert (run_dir / "s3_buckets.json").exists()
        archive = tmp_path / f"{run_dir.name}.zip"
        with zipfile.ZipFile(archive) as zf:
            assert f"{run_dir.name}/s3_buckets.json" in zf.namelist()

    def test_unverified_credentials_are_not_fatal(
        self, runner: CliRunner, provider: FakeProvider, tmp_path: Path
    ) -> None:
        with patch("awsaudit.audit.collector.create_boto_client", provider), patch(
            "awsaudit.cli.main.validate_credentials", side_effect=CredentialValidationError("no credentials")
        ):
            result = runner.invoke(app, ["run", "-c", "s3_buckets", "-o", str(tmp_path)])

        assert result.exit_code == 0
        assert "Could not verify credentials" in result.stdout

    def test_unknown_category(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(app, ["run", "-c", "lambda_functions", "-o", str(tmp_path)])

        assert result.exit_code == 1
        assert "Unknown category" in result.stdout
        assert run_dirs(tmp_path) == []

    def test_invalid_format(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(app, ["run", "--format", "xml", "-o", str(tmp_path)])

        assert result.exit_code == 1
        assert "Invalid report format" in result.stdout

    def test_location_error_exits_with_two(self, runner: CliRunner, provider: FakeProvider, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("")

        with patch("awsaudit.audit.collector.create_boto_client", provider), patch(
            "awsaudit.cli.main.validate_credentials", return_value=IDENTITY
        ):
            result = runner.invoke(app, ["run", "-c", "s3_buckets", "-o", str(blocker)])

        assert result.exit_code == 2
        assert "Audit failed" in result.stdout


class TestSummaryCommand:
    """Tests for `awsaudit summary`."""

    def test_summary_prints_counts(self, runner: CliRunner, provider: FakeProvider) -> None:
        with patch("awsaudit.audit.collector.create_boto_client", provider):
            result = runner.invoke(app, ["summary", "-c", "ec2_instances", "-c", "s3_buckets"])

        assert result.exit_code == 0, result.stdout
        assert "EC2 instances" in result.stdout
        assert "3" in result.stdout

    def test_summary_writes_digest(self, runner: CliRunner, provider: FakeProvider, tmp_path: Path) -> None:
        output = tmp_path / "digest.txt"
        with patch("awsaudit.audit.collector.create_boto_client", provider):
            result = runner.invoke(app, ["summary", "-c", "iam_users", "-c", "s3_buckets", "--output", str(output)])

        assert result.exit_code == 1
        lines = output.read_text().splitlines()
        assert lines[0].startswith("AWS audit run ")
        assert lines[-2:] == ["IAM users: unavailable", "S3 buckets: 2"]


class TestInfoCommands:
    """Tests for `awsaudit categories` and `awsaudit version`."""

    def test_categories(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["categories"])

        assert result.exit_code == 0
        for name in category_names():
            assert name in result.stdout

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "awsaudit version" in result.stdout
