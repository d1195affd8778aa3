"""Typer-based command line driver for nyth."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import configure_logging, load_config
from .detectors.registry import detector_metadata, get_all_issue_detectors
from .errors import NythError
from .ingest import collect_artifacts, load_foundry_outputs
from .report import Report, run_detectors

app = typer.Typer(
    help="Static analysis for Solidity compiler ASTs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"nyth v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    )
):
    """nyth: run detectors over solc / Foundry AST output."""


def _print_report(report: Report) -> None:
    table = Table(title="Issue Summary")
    table.add_column("Category")
    table.add_column("No. of Issues", justify="right")
    for label, count in report.summary().items():
        table.add_row(label, str(count))
    console.print(table)

    for issue in report.issues:
        console.print(f"\n[bold]{issue.severity.label}[/bold] {issue.name}: {escape(issue.title)}")
        for instance in issue.instances:
            console.print(f"  - Found in {instance.file_path or 'unknown'}: Line: {instance.line}")

    for failure in report.failures:
        console.print(f"[red]Detector {failure.name} failed:[/red] {escape(failure.error)}")


@app.command("analyze")
def analyze(
    artifacts: List[Path] = typer.Argument(..., exists=True, help="Foundry artifacts or directories of them."),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to nyth.toml."),
    detectors: Optional[List[str]] = typer.Option(None, "--detector", "-d", help="Only run these detectors."),
    jobs: Optional[int] = typer.Option(None, "--jobs", "-j", min=1, help="Run detectors on N threads."),
    source_root: Optional[Path] = typer.Option(None, "--source-root", help="Where absolute paths in the ASTs are rooted."),
    fail_on_issues: bool = typer.Option(False, "--fail-on-issues", help="Exit 1 when anything is found."),
):
    """Load AST artifacts, run detectors and print a summary."""
    try:
        config = load_config(config_path)
        if detectors:
            config.detectors = list(detectors)
        if jobs:
            config.jobs = jobs
        configure_logging(config.log_level)

        selected = config.selected_detectors()
        context = load_foundry_outputs(collect_artifacts(artifacts), source_root)
    except NythError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=2)

    console.print(
        f"Loaded {len(context.source_units)} source unit(s); running {len(selected)} detector(s)."
    )
    report = run_detectors(context, selected, max_workers=config.jobs)
    _print_report(report)

    if fail_on_issues and report.has_issues:
        raise typer.Exit(code=1)


@app.command("detectors")
def list_detectors(
    as_json: bool = typer.Option(False, "--json", help="Print metadata as JSON."),
):
    """List the registered detectors."""
    metadata = detector_metadata(get_all_issue_detectors())
    if as_json:
        typer.echo(json.dumps(metadata, indent=2))
        return

    table = Table(title="Detectors")
    table.add_column("Name", no_wrap=True)
    table.add_column("Severity")
    table.add_column("Title")
    for entry in metadata:
        table.add_row(entry["name"], entry["severity"], entry["title"])
    console.print(table)


if __name__ == "__main__":
    app()
