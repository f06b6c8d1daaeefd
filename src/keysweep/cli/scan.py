"""CLI command: keysweep scan <path>... — scan local files for leaked secrets."""

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
from keysweep.session.models import UploadScanRequest
from keysweep.sources.local import collect_uploads


@click.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True))
@format_option
@output_option
@click.pass_context
def scan(
    ctx: click.Context,
    paths: tuple[str, ...],
    fmt: str,
    output: str | None,
) -> None:
    """Scan local files and directories for hardcoded keys and secrets."""
    config = load_config(ctx)
    uploads = collect_uploads(list(paths))

    console.print(
        f"[bold]keysweep[/bold] scanning [cyan]{len(uploads)}[/cyan] file(s)\n"
    )

    service = ScanService(config)
    try:
        scan_id = service.start_scan(UploadScanRequest(files=tuple(uploads)))
    except InvalidScanRequest as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(EXIT_FAILED)

    try:
        report = follow_scan(service, scan_id, show_progress=fmt == "table")
    finally:
        service.close()
    emit_report(service, scan_id, report, fmt, output)
