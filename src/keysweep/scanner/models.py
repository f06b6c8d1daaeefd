"""Scanner data models — matches, scan results, and aggregate statistics."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass

SENSITIVE_FILE_TYPE = "Sensitive File"


class Severity(enum.Enum):
    """Finding severity tier."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort key, most severe first."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
}


@dataclass(frozen=True)
class Match:
    """A single leak found in one file, before it is assigned a result id."""

    file: str
    type: str
    matched_text: str
    line: int
    severity: Severity


@dataclass(frozen=True)
class ScanResult:
    """A match with an identifier unique within its scan."""

    id: str
    file: str
    type: str
    match: str
    severity: Severity
    line: int | None = None

    @classmethod
    def from_match(cls, scan_id: str, index: int, match: Match) -> ScanResult:
        return cls(
            id=f"{scan_id}-{index}",
            file=match.file,
            type=match.type,
            match=match.matched_text,
            severity=match.severity,
            line=match.line,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "file": self.file,
            "type": self.type,
            "match": self.match,
            "severity": self.severity.value,
            "line": self.line,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ScanResult:
        line = data.get("line")
        return cls(
            id=str(data["id"]),
            file=str(data["file"]),
            type=str(data["type"]),
            match=str(data["match"]),
            severity=Severity(data["severity"]),
            line=int(line) if line is not None else None,
        )


@dataclass(frozen=True)
class ScanStats:
    """Aggregate counts derived from a complete result set.

    Always build through :meth:`from_results` so that the per-severity
    counts add up to ``total_leaks``.
    """

    total_files: int = 0
    total_leaks: int = 0
    critical_leaks: int = 0
    high_leaks: int = 0
    medium_leaks: int = 0
    low_leaks: int = 0

    @classmethod
    def from_results(
        cls,
        results: Iterable[ScanResult],
        total_files: int,
    ) -> ScanStats:
        counts = {severity: 0 for severity in Severity}
        total = 0
        for result in results:
            counts[result.severity] += 1
            total += 1
        return cls(
            total_files=total_files,
            total_leaks=total,
            critical_leaks=counts[Severity.CRITICAL],
            high_leaks=counts[Severity.HIGH],
            medium_leaks=counts[Severity.MEDIUM],
            low_leaks=counts[Severity.LOW],
        )

    def to_dict(self) -> dict:
        return {
            "total_files": self.total_files,
            "total_leaks": self.total_leaks,
            "critical_leaks": self.critical_leaks,
            "high_leaks": self.high_leaks,
            "medium_leaks": self.medium_leaks,
            "low_leaks": self.low_leaks,
        }
