"""Export scan results as JSON or CSV."""

from __future__ import annotations

import json
from collections.abc import Iterable

from keysweep.scanner.models import ScanResult

CSV_HEADERS = ("File", "Type", "Match", "Severity", "Line")

EXPORT_FORMATS = ("json", "csv")


def to_json(results: Iterable[ScanResult]) -> str:
    return json.dumps([r.to_dict() for r in results], indent=2)


def from_json(text: str) -> list[ScanResult]:
    """Parse the output of :func:`to_json` back into results."""
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError("Expected a JSON array of scan results")
    return [ScanResult.from_dict(item) for item in data]


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def to_csv(results: Iterable[ScanResult]) -> str:
    """Render results as CSV; severity is bare and a missing line is empty."""
    rows = [",".join(CSV_HEADERS)]
    for r in results:
        rows.append(
            ",".join(
                [
                    _quote(r.file),
                    _quote(r.type),
                    _quote(r.match),
                    r.severity.value,
                    str(r.line) if r.line is not None else "",
                ]
            )
        )
    return "\n".join(rows)


def export_results(results: Iterable[ScanResult], fmt: str = "json") -> str:
    if fmt == "json":
        return to_json(results)
    if fmt == "csv":
        return to_csv(results)
    raise ValueError(f"Unsupported export format: {fmt!r}")
