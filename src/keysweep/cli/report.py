"""Shared CLI plumbing — config loading, progress polling, and result rendering."""

from __future__ import annotations

import sys
import time
from pathlib import Path

import click
from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from keysweep.config import KeySweepConfig
from keysweep.errors import ConfigError
from keysweep.scanner.models import ScanResult, Severity
from keysweep.session.manager import ScanService
from keysweep.session.models import ScanReport

console = Console(stderr=True)

_SEVERITY_COLORS = {
    Severity.CRITICAL: "red",
    Severity.HIGH: "magenta",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
}

_POLL_INTERVAL = 0.1

EXIT_CRITICAL = 1
EXIT_FAILED = 2

format_option = click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(["table", "json", "csv"]),
    default="table",
    show_default=True,
    help="Output format.",
)
output_option = click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write json/csv output to a file instead of stdout.",
)


def load_config(ctx: click.Context) -> KeySweepConfig:
    try:
        config = KeySweepConfig.load(ctx.obj.get("config_path"))
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(EXIT_FAILED)
    config.verbose = bool(ctx.obj.get("verbose"))
    return config


def follow_scan(service: ScanService, scan_id: str, show_progress: bool) -> ScanReport:
    """Poll a running scan until it is terminal, drawing a progress bar."""
    if not show_progress:
        service.wait(scan_id)
        return service.get_results(scan_id)

    with Progress(
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Scanning", total=100)
        while True:
            snapshot = service.get_progress(scan_id)
            progress.update(
                task,
                completed=snapshot.progress,
                description=snapshot.status[:60],
            )
            if snapshot.progress >= 100:
                break
            time.sleep(_POLL_INTERVAL)

    return service.get_results(scan_id)


def emit_report(
    service: ScanService,
    scan_id: str,
    report: ScanReport,
    fmt: str,
    output: str | None,
) -> None:
    """Print or export a finished report and exit with the matching code."""
    if not report.success:
        console.print(f"[red]{report.message}[/red]")
        sys.exit(EXIT_FAILED)

    if fmt == "table":
        _print_table(list(report.results))
        _print_summary(report)
    else:
        text = service.export_results(scan_id, fmt)
        if output:
            Path(output).write_text(text + "\n", encoding="utf-8")
            console.print(f"Wrote {len(report.results)} result(s) to [cyan]{output}[/cyan]")
        else:
            click.echo(text)

    if report.stats.critical_leaks > 0:
        console.print(f"\n[red]{report.stats.critical_leaks} critical finding(s)[/red]")
        sys.exit(EXIT_CRITICAL)


def _print_table(results: list[ScanResult]) -> None:
    if not results:
        console.print("[green]No leaks found.[/green]")
        return

    results.sort(key=lambda r: (r.severity.rank, r.file, r.line or 0))

    table = Table(title="Findings", show_lines=False)
    table.add_column("Severity", style="bold", width=10)
    table.add_column("File", style="cyan")
    table.add_column("Line", justify="right")
    table.add_column("Type")
    table.add_column("Match", max_width=50)

    for result in results:
        color = _SEVERITY_COLORS.get(result.severity, "white")
        table.add_row(
            f"[{color}]{result.severity.value}[/{color}]",
            result.file,
            str(result.line) if result.line is not None else "",
            result.type,
            result.match[:50],
        )

    console.print(table)


def _print_summary(report: ScanReport) -> None:
    stats = report.stats
    console.print(
        f"\nScanned {stats.total_files} file(s), "
        f"found {stats.total_leaks} leak(s): "
        f"[red]{stats.critical_leaks} critical[/red], "
        f"[magenta]{stats.high_leaks} high[/magenta], "
        f"[yellow]{stats.medium_leaks} medium[/yellow], "
        f"[blue]{stats.low_leaks} low[/blue]"
    )
