"""CLI command: keysweep github <repo> — scan a public GitHub repository."""

from __future__ import annotations

import sys

import click

from keysweep.cli.report import (
    EXIT_FAILED,
    console,
    emit_report,
    follow_scan,
    format_option,
    load_config,
    output_option,
)
from keysweep.errors import InvalidScanRequest
from keysweep.session.manager import ScanService
from keysweep.session.models import GitHubScanRequest


@click.command()
@click.argument("repo")
@click.option(
    "--max-files",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of files to fetch (default: 50).",
)
@format_option
@output_option
@click.pass_context
def github(
    ctx: click.Context,
    repo: str,
    max_files: int | None,
    fmt: str,
    output: str | None,
) -> None:
    """Scan a public GitHub repository (URL or OWNER/REPO)."""
    config = load_config(ctx)
    service = ScanService(config)

    try:
        scan_id = service.start_scan(
            GitHubScanRequest(repo_url=repo, max_files=max_files)
        )
    except InvalidScanRequest as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(EXIT_FAILED)

    session = service.get_session(scan_id)
    console.print(
        f"[bold]keysweep[/bold] scanning [cyan]{session.source}[/cyan]\n"
    )

    try:
        report = follow_scan(service, scan_id, show_progress=fmt == "table")
    finally:
        service.close()
    emit_report(service, scan_id, report, fmt, output)
