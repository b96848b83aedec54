"""Main CLI entry point using Typer."""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..audit.catalog import DEFAULT_CATEGORIES
from ..audit.errors import AuditLocationError, UnknownCategoryError
from ..aws.credentials import CredentialValidationError, validate_credentials
from ..models.audit_run import AuditRun, RunStatus
from ..utils.logging import setup_logging
from .config import Config

logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="awsaudit",
    help="AWS Audit - read-only resource inventory reports and count digest",
    add_completion=False,
)

# Create Rich console for output
console = Console()

# Global config
config: Optional[Config] = None


@app.callback()
def main(
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="AWS profile name"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="AWS region for regional categories"),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Config file (default: $AWS_AUDIT_CONFIG or ~/.awsaudit/config.yaml)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output except errors"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
):
    """AWS Audit - read-only resource inventory reports and count digest."""
    global config

    # Load configuration
    try:
        config = Config.load(config_path)
    except ValueError as e:
        console.print(f"✗ Configuration error: {e}", style="bold red")
        raise typer.Exit(code=1)

    # Override with CLI options
    if profile:
        config.aws_profile = profile
    if region:
        config.region = region

    # Setup logging
    log_level = "ERROR" if quiet else ("DEBUG" if verbose else config.log_level)
    setup_logging(level=log_level, verbose=verbose)

    # Disable colors if requested
    if no_color:
        console.no_color = True


@app.command()
def version():
    """Show version information."""
    import boto3

    from .. import __version__

    console.print(f"awsaudit version {__version__}")
    console.print(f"Python {sys.version.split()[0]}")
    console.print(f"boto3 {boto3.__version__}")


@app.command("categories")
def list_categories():
    """List the resource categories that can be audited."""
    table = Table(title="Audit Categories", show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("API Call")
    table.add_column("Scope")
    table.add_column("Fields")

    for category in DEFAULT_CATEGORIES:
        table.add_row(
            category.name,
            category.title,
            f"{category.service}.{category.operation}",
            "global" if category.is_global else "regional",
            ", ".join(category.headers),
        )

    console.print(table)


def _show_identity(profile: Optional[str], region: Optional[str]) -> None:
    """Print the caller identity; an unresolvable identity is only a warning."""
    try:
        identity = validate_credentials(profile, region)
        console.print(f"✓ Authenticated for account: {identity['account_id']}", style="green")
    except CredentialValidationError as e:
        logger.debug(f"Credential validation failed: {e}")
        console.print(f"⚠ Could not verify credentials: {e}", style="yellow")
        console.print("  Continuing; affected categories will be reported as unavailable.\n")


def _display_run(run: AuditRun, summary_table: Table) -> None:
    console.print()
    console.print(summary_table)

    if run.failed_results:
        console.print()
        console.print("[bold red]Collection failures:[/bold red]")
        for result in run.failed_results:
            console.print(f"  ✗ {result.category} ({result.status.value}): {result.error}")

    console.print()
    lines = [
        f"[bold]Run:[/bold] {run.run_id}",
        f"[bold]Status:[/bold] {run.status.value}",
        f"[bold]Reports:[/bold] {run.output_dir}",
    ]
    if run.bundle_path:
        lines.append(f"[bold]Bundle:[/bold] {run.bundle_path}")
    style = "green" if run.status == RunStatus.SUCCESS else "yellow"
    console.print(Panel("\n".join(lines), title="AWS Audit", border_style=style))


@app.command("run")
def run_command(
    categories: Optional[List[str]] = typer.Option(
        None, "--category", "-c", help="Category to audit (repeatable; default: all)"
    ),
    output_dir: Optional[str] = typer.Option(
        None, "--output-dir", "-o", help="Directory in which the run directory is created"
    ),
    bundle: Optional[bool] = typer.Option(None, "--bundle/--no-bundle", help="Zip the run directory when done"),
    report_format: Optional[str] = typer.Option(None, "--format", "-f", help="Report format: table, json or csv"),
    max_workers: Optional[int] = typer.Option(None, "--max-workers", help="Concurrent provider queries", min=1),
    reuse_counts: bool = typer.Option(
        False, "--reuse-counts", help="Reuse collected record counts in the digest instead of re-counting"
    ),
):
    """Run a full audit: one report per category plus a count digest.

    Examples:
        # Audit every category in the configured region
        awsaudit run

        # Audit two categories for a specific profile and bundle the results
        awsaudit --profile prod run -c ec2_instances -c s3_buckets --bundle
    """
    try:
        from ..audit.orchestrator import AuditOrchestrator

        if categories:
            config.categories = list(categories)
        if output_dir:
            config.output_dir = output_dir
        if bundle is not None:
            config.bundle = bundle
        if report_format:
            config.report_format = report_format
        if max_workers:
            config.max_workers = max_workers
        if reuse_counts:
            config.reuse_collected_counts = True

        try:
            config.validate()
            audit_config = config.to_audit_config()
        except (ValueError, UnknownCategoryError) as e:
            console.print(f"✗ Error: {e}", style="bold red")
            raise typer.Exit(code=1)

        _show_identity(audit_config.profile, audit_config.region)

        orchestrator = AuditOrchestrator(audit_config)
        with console.status(f"Auditing {len(audit_config.categories)} categories..."):
            run = orchestrator.run()

        _display_run(run, orchestrator.aggregator.render(run.summary, title=f"Resource Counts ({run.run_id})"))

        if run.status != RunStatus.SUCCESS:
            raise typer.Exit(code=1)

    except typer.Exit:
        raise
    except AuditLocationError as e:
        console.print(f"✗ Audit failed: {e}", style="bold red")
        raise typer.Exit(code=2)
    except Exception as e:
        console.print(f"✗ Unexpected error: {e}", style="bold red")
        logger.exception("Error running audit")
        raise typer.Exit(code=2)


@app.command("summary")
def summary_command(
    categories: Optional[List[str]] = typer.Option(
        None, "--category", "-c", help="Category to count (repeatable; default: all)"
    ),
    output: Optional[str] = typer.Option(None, "--output", help="Also write the digest to this file"),
):
    """Count resources per category without writing full reports."""
    try:
        from datetime import datetime, timezone

        from ..audit.summary import SummaryAggregator

        if categories:
            config.categories = list(categories)

        try:
            audit_config = config.to_audit_config()
        except (ValueError, UnknownCategoryError) as e:
            console.print(f"✗ Error: {e}", style="bold red")
            raise typer.Exit(code=1)

        aggregator = SummaryAggregator()
        with console.status(f"Counting {len(audit_config.categories)} categories..."):
            entries = aggregator.summarize(audit_config.categories, audit_config)

        console.print(aggregator.render(entries))

        if output:
            run = AuditRun.create(
                output_root=Path(output).parent,
                created_at=datetime.now(timezone.utc),
                profile=audit_config.profile,
                region=audit_config.region,
            )
            try:
                path = aggregator.write_digest(run, entries, Path(output))
            except AuditLocationError as e:
                console.print(f"✗ {e}", style="bold red")
                raise typer.Exit(code=2)
            console.print(f"\n✓ Digest written to {path}", style="green")

        if any(not entry.available for entry in entries):
            raise typer.Exit(code=1)

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"✗ Unexpected error: {e}", style="bold red")
        logger.exception("Error counting resources")
        raise typer.Exit(code=2)


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
