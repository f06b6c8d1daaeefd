"""Session data models — scan requests, progress snapshots, and session state."""

from __future__ import annotations

import enum
import threading
import time
import uuid
from dataclasses import dataclass, field

from keysweep.scanner.models import ScanResult, ScanStats


class ScanState(enum.Enum):
    """Lifecycle state of a scan session."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ScanState.COMPLETE, ScanState.FAILED)


@dataclass(frozen=True)
class UploadedFile:
    """One file of an upload batch; bytes are decoded as UTF-8 when scanned."""

    name: str
    content: str | bytes


@dataclass(frozen=True)
class UploadScanRequest:
    files: tuple[UploadedFile, ...]

    kind = "upload"


@dataclass(frozen=True)
class GitHubScanRequest:
    repo_url: str
    max_files: int | None = None

    kind = "github"


ScanRequest = UploadScanRequest | GitHubScanRequest


@dataclass(frozen=True)
class ScanProgress:
    """Point-in-time view of a session's progress."""

    progress: int
    status: str
    current_file: str | None = None

    def to_dict(self) -> dict:
        return {
            "progress": self.progress,
            "status": self.status,
            "current_file": self.current_file,
        }


@dataclass(frozen=True)
class ScanReport:
    """Results and statistics of a session."""

    success: bool
    results: tuple[ScanResult, ...]
    stats: ScanStats
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "results": [r.to_dict() for r in self.results],
            "stats": self.stats.to_dict(),
            "message": self.message,
        }


def new_scan_id() -> str:
    return f"scan-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


@dataclass
class ScanSession:
    """Mutable record of one scan, updated in place by the scan pipeline.

    Writers and readers go through the methods below, which hold the
    session lock, so a reader never sees results and stats out of step.
    """

    kind: str
    source: str
    id: str = field(default_factory=new_scan_id)
    state: ScanState = ScanState.PENDING
    progress: int = 0
    status: str = "Initializing scan..."
    current_file: str | None = None
    results: list[ScanResult] = field(default_factory=list)
    stats: ScanStats = field(default_factory=ScanStats)
    created_at: float = field(default_factory=time.time)
    finished_at: float | None = None
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )
    _done: threading.Event = field(
        default_factory=threading.Event, repr=False, compare=False
    )

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def advance(self, progress: int, status: str, current_file: str | None = None) -> None:
        """Move progress forward; never backwards and never to 100."""
        with self._lock:
            if self.state.is_terminal:
                return
            self.state = ScanState.RUNNING
            self.progress = max(self.progress, min(progress, 99))
            self.status = status
            self.current_file = current_file

    def complete(self, results: list[ScanResult], total_files: int) -> None:
        with self._lock:
            if self.state.is_terminal:
                return
            self.results = list(results)
            self.stats = ScanStats.from_results(self.results, total_files)
            self._finish(ScanState.COMPLETE, "Scan complete")

    def fail(self, reason: str) -> None:
        with self._lock:
            if self.state.is_terminal:
                return
            self.results = []
            self.stats = ScanStats()
            self._finish(ScanState.FAILED, f"Scan failed: {reason}")

    def _finish(self, state: ScanState, status: str) -> None:
        self.state = state
        self.progress = 100
        self.status = status
        self.current_file = None
        self.finished_at = time.time()
        self._done.set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._done.wait(timeout)

    def snapshot_progress(self) -> ScanProgress:
        with self._lock:
            return ScanProgress(
                progress=self.progress,
                status=self.status,
                current_file=self.current_file,
            )

    def snapshot_report(self) -> ScanReport:
        with self._lock:
            if self.state == ScanState.COMPLETE:
                message = "Scan completed successfully"
            else:
                message = self.status
            return ScanReport(
                success=self.state != ScanState.FAILED,
                results=tuple(self.results),
                stats=self.stats,
                message=message,
            )

    def snapshot_results(self) -> list[ScanResult]:
        with self._lock:
            return list(self.results)
