"""Scan service — session registry plus the background scan pipeline."""

from __future__ import annotations

import logging
import threading
import time

from keysweep.config import KeySweepConfig
from keysweep.errors import (
    InvalidScanRequest,
    RepositoryError,
    ScanNotFound,
)
from keysweep.export import export_results
from keysweep.scanner.matcher import scan_content
from keysweep.scanner.models import Match, ScanResult
from keysweep.session.models import (
    GitHubScanRequest,
    ScanProgress,
    ScanReport,
    ScanRequest,
    ScanSession,
    UploadedFile,
    UploadScanRequest,
)
from keysweep.sources.github import GitHubClient, RepoRef, parse_repo_url

logger = logging.getLogger(__name__)

# Share of the progress bar spent before per-file scanning starts (GitHub only)
_DISCOVERY_PROGRESS = 10
_SCANNING_PROGRESS = 90


class SessionRegistry:
    """Thread-safe store of scan sessions keyed by id.

    Terminal sessions older than ``ttl`` seconds are dropped on the next
    registration or lookup. A ``ttl`` of 0 keeps every session.
    """

    def __init__(self, ttl: float = 0.0) -> None:
        self._ttl = ttl
        self._sessions: dict[str, ScanSession] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def add(self, session: ScanSession) -> None:
        with self._lock:
            self._purge_expired()
            self._sessions[session.id] = session

    def get(self, scan_id: str) -> ScanSession:
        with self._lock:
            self._purge_expired()
            session = self._sessions.get(scan_id)
        if session is None:
            raise ScanNotFound(scan_id)
        return session

    def _purge_expired(self) -> None:
        if self._ttl <= 0:
            return
        cutoff = time.time() - self._ttl
        expired = [
            sid
            for sid, s in self._sessions.items()
            if s.finished_at is not None and s.finished_at < cutoff
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.debug("Evicted %d expired session(s)", len(expired))


class ScanService:
    """Starts scans in the background and answers progress/result queries.

    Construct one per process and share it; each scan runs on its own
    thread and processes files strictly one at a time.
    """

    def __init__(
        self,
        config: KeySweepConfig | None = None,
        github: GitHubClient | None = None,
        registry: SessionRegistry | None = None,
    ) -> None:
        self._config = config or KeySweepConfig()
        self._github = github or GitHubClient(
            api_base=self._config.github_api_base,
            timeout=self._config.request_timeout,
        )
        self._registry = registry or SessionRegistry(ttl=self._config.session_ttl)

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    def close(self) -> None:
        self._github.close()

    def start_scan(self, request: ScanRequest) -> str:
        """Validate ``request``, start it in the background, return its id.

        Raises:
            InvalidScanRequest: empty upload batch, unparseable repository,
                or a file cap outside ``1..max_repo_files``.
        """
        if isinstance(request, UploadScanRequest):
            if not request.files:
                raise InvalidScanRequest("No files to scan")
            session = ScanSession(kind=request.kind, source=f"{len(request.files)} file(s)")
            target = self._run_upload
            args: tuple = (session, request.files)
        elif isinstance(request, GitHubScanRequest):
            ref = parse_repo_url(request.repo_url)
            max_files = self._file_cap(request.max_files)
            session = ScanSession(kind=request.kind, source=str(ref))
            target = self._run_github
            args = (session, ref, max_files)
        else:
            raise InvalidScanRequest(f"Unsupported scan request: {request!r}")

        self._registry.add(session)
        logger.info("Starting %s scan %s (%s)", session.kind, session.id, session.source)

        thread = threading.Thread(
            target=target,
            args=args,
            name=f"keysweep-{session.id}",
            daemon=True,
        )
        thread.start()
        return session.id

    def get_session(self, scan_id: str) -> ScanSession:
        return self._registry.get(scan_id)

    def get_progress(self, scan_id: str) -> ScanProgress:
        return self._registry.get(scan_id).snapshot_progress()

    def get_results(self, scan_id: str) -> ScanReport:
        return self._registry.get(scan_id).snapshot_report()

    def export_results(self, scan_id: str, fmt: str = "json") -> str:
        results = self._registry.get(scan_id).snapshot_results()
        return export_results(results, fmt)

    def wait(self, scan_id: str, timeout: float | None = None) -> bool:
        """Block until the scan is terminal. Returns False on timeout."""
        return self._registry.get(scan_id).wait(timeout)

    def _file_cap(self, requested: int | None) -> int:
        limit = self._config.max_repo_files
        if requested is None:
            return limit
        if not 1 <= requested <= limit:
            raise InvalidScanRequest(f"max_files must be between 1 and {limit}")
        return requested

    # -- pipelines --------------------------------------------------------

    def _run_upload(
        self,
        session: ScanSession,
        files: tuple[UploadedFile, ...],
    ) -> None:
        try:
            matches: list[Match] = []
            total = len(files)
            for i, uploaded in enumerate(files):
                session.advance(
                    i * _SCANNING_PROGRESS // total,
                    f"Scanning file: {uploaded.name}",
                    uploaded.name,
                )
                try:
                    content = _decode(uploaded.content)
                except UnicodeDecodeError as e:
                    logger.warning("Failed to scan file %s: %s", uploaded.name, e)
                    continue
                matches.extend(scan_content(uploaded.name, content))

            self._finalize(session, matches, total)
        except Exception as e:
            logger.exception("Scan %s failed", session.id)
            session.fail(str(e) or type(e).__name__)

    def _run_github(self, session: ScanSession, ref: RepoRef, max_files: int) -> None:
        try:
            session.advance(_DISCOVERY_PROGRESS, "Fetching repository contents...")
            files = self._github.collect_files(ref.owner, ref.repo, max_files)
            if not files:
                raise RepositoryError("No scannable files found in repository")

            matches: list[Match] = []
            total = len(files)
            span = _SCANNING_PROGRESS - _DISCOVERY_PROGRESS
            for i, entry in enumerate(files):
                session.advance(
                    _DISCOVERY_PROGRESS + i * span // total,
                    f"Scanning: {entry.path}",
                    entry.path,
                )
                if not entry.download_url:
                    logger.debug("No download URL for %s", entry.path)
                    continue
                try:
                    content = self._github.fetch_content(entry.download_url)
                except RepositoryError as e:
                    logger.warning("Failed to scan file %s: %s", entry.path, e)
                    continue
                if not content:
                    continue
                matches.extend(scan_content(entry.path, content))

            self._finalize(session, matches, total)
        except RepositoryError as e:
            logger.error("Scan %s failed: %s", session.id, e)
            session.fail(str(e))
        except Exception as e:
            logger.exception("Scan %s failed", session.id)
            session.fail(str(e) or type(e).__name__)

    def _finalize(self, session: ScanSession, matches: list[Match], total_files: int) -> None:
        results = [
            ScanResult.from_match(session.id, index, match)
            for index, match in enumerate(matches)
        ]
        session.complete(results, total_files)
        logger.info(
            "Scan %s complete: %d file(s), %d leak(s)",
            session.id,
            total_files,
            len(results),
        )


def _decode(content: str | bytes) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8")
    return content
