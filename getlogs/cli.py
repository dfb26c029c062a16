"""
Command-line interface for getlogs.

Each command takes one or more issue IDs and runs the matching step for each
of them in turn: fetch attachments, extract logs, convert logs, or all three.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from getlogs import __version__
from getlogs.config import get_settings
from getlogs.models import BatchPolicy, BatchReport, Step
from getlogs.pipeline import create_batch_runner
from getlogs.utils.errors import ConfigCreatedError, GetlogsException
from getlogs.utils.logging import setup_logging

# Initialize Typer app and Rich console
app = typer.Typer(
    name="getlogs",
    help="Fetch issue attachments and extract log files from them",
    add_completion=False,
)
console = Console()

IssueIds = typer.Argument(..., help="Issue IDs to process, e.g. PROJ-123")
PolicyOption = typer.Option(
    None,
    "--continue-on-error/--abort-on-error",
    help="Keep processing the remaining issues after a failure (default from config)",
)


def _print_report(report: BatchReport) -> None:
    table = Table(title="Failed issues")
    table.add_column("Issue", style="cyan")
    table.add_column("Error", style="red")

    for result in report.failed:
        table.add_row(result.issue_id, escape(result.error or ""))

    console.print(table)
    console.print(
        f"{len(report.succeeded)} succeeded, [red]{len(report.failed)} failed[/red]"
    )


def _run(ctx: typer.Context, issue_ids: List[str], step: Step, keep_going: Optional[bool]) -> None:
    """Load settings and run ``step`` over the given issues."""
    options = ctx.obj or {}

    try:
        settings = get_settings(options.get("config"))
    except ConfigCreatedError as e:
        console.print(f"[yellow]{escape(e.message)}[/yellow]")
        raise typer.Exit(1)
    except GetlogsException as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    log_level = "DEBUG" if options.get("debug") else settings.log_level
    setup_logging(log_level=log_level, log_file_path=settings.log_file)

    policy = None
    if keep_going is not None:
        policy = BatchPolicy.CONTINUE if keep_going else BatchPolicy.ABORT

    runner = create_batch_runner(settings, policy=policy, console=console)

    try:
        report = runner.run(issue_ids, step)
    except GetlogsException as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if not report.ok:
        _print_report(report)
        raise typer.Exit(1)


@app.command()
def fetch(
    ctx: typer.Context,
    issue_ids: List[str] = IssueIds,
    keep_going: Optional[bool] = PolicyOption,
):
    """Download the attachments of each issue."""
    _run(ctx, issue_ids, Step.FETCH, keep_going)


@app.command()
def extract(
    ctx: typer.Context,
    issue_ids: List[str] = IssueIds,
    keep_going: Optional[bool] = PolicyOption,
):
    """Extract log files from each issue's attachments."""
    _run(ctx, issue_ids, Step.EXTRACT, keep_going)


@app.command()
def convert(
    ctx: typer.Context,
    issue_ids: List[str] = IssueIds,
    keep_going: Optional[bool] = PolicyOption,
):
    """Convert extracted DLT traces (not implemented yet)."""
    _run(ctx, issue_ids, Step.CONVERT, keep_going)


@app.command("all")
def run_all(
    ctx: typer.Context,
    issue_ids: List[str] = IssueIds,
    keep_going: Optional[bool] = PolicyOption,
):
    """Fetch, extract and convert each issue."""
    _run(ctx, issue_ids, Step.ALL, keep_going)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"getlogs {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config.json (default: ~/.getlogs/config.json)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
):
    """getlogs - fetch issue attachments and extract log files."""
    ctx.obj = {"debug": debug, "config": config}


if __name__ == "__main__":
    app()
