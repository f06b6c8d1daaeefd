"""GitHub contents API client — repository resolution, listing, and fetching.

Only public repositories are supported; requests are unauthenticated and
issued one at a time to stay inside the anonymous rate limit.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from dataclasses import dataclass

import requests

from keysweep import __version__
from keysweep.errors import InvalidRepoUrl, RepositoryError

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.github.com"

_REPO_URL_PATTERNS = [
    re.compile(r"github\.com/([^/]+)/([^/]+?)(?:\.git)?(?:/.*)?$"),
    re.compile(r"^([^/]+)/([^/]+)$"),
]

_TEXT_EXTENSIONS = (
    ".js",
    ".jsx",
    ".ts",
    ".tsx",
    ".py",
    ".java",
    ".cpp",
    ".c",
    ".h",
    ".php",
    ".rb",
    ".go",
    ".rs",
    ".swift",
    ".kt",
    ".scala",
    ".sh",
    ".yml",
    ".yaml",
    ".json",
    ".xml",
    ".html",
    ".css",
    ".scss",
    ".env",
    ".config",
    ".conf",
    ".ini",
    ".properties",
    ".txt",
    ".md",
    ".sql",
    ".dockerfile",
    ".gitignore",
    ".gitattributes",
)

# Build output, dependency and VCS directories never worth descending into
SKIP_DIRS = frozenset(
    {
        "node_modules",
        ".git",
        "dist",
        "build",
        "target",
        "vendor",
        "__pycache__",
        ".pytest_cache",
        "coverage",
        ".nyc_output",
        "logs",
        "tmp",
        "temp",
        ".cache",
        ".vscode",
        ".idea",
    }
)


@dataclass(frozen=True)
class RepoRef:
    """An owner/repo pair."""

    owner: str
    repo: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class RepoEntry:
    """One item of a contents API directory listing."""

    name: str
    path: str
    type: str
    download_url: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> RepoEntry:
        return cls(
            name=data.get("name", ""),
            path=data.get("path", ""),
            type=data.get("type", ""),
            download_url=data.get("download_url"),
        )


def parse_repo_url(url: str) -> RepoRef:
    """Resolve a GitHub URL or bare ``owner/repo`` string.

    Raises:
        InvalidRepoUrl: if neither form matches.
    """
    candidate = url.strip()
    for pattern in _REPO_URL_PATTERNS:
        m = pattern.search(candidate)
        if m:
            return RepoRef(owner=m.group(1), repo=m.group(2))
    raise InvalidRepoUrl(url)


def is_text_file(file_name: str) -> bool:
    """Heuristic for files worth fetching and scanning."""
    lower = file_name.lower()
    return (
        lower.endswith(_TEXT_EXTENSIONS)
        or ".env" in lower
        or lower in ("dockerfile", "makefile")
    )


def should_skip_directory(dir_name: str) -> bool:
    return dir_name in SKIP_DIRS or dir_name.startswith(".")


class GitHubClient:
    """Thin wrapper over the GitHub contents API."""

    def __init__(
        self,
        api_base: str = DEFAULT_API_BASE,
        timeout: float | None = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._http = session or requests.Session()
        self._http.headers.update(
            {
                "User-Agent": f"keysweep/{__version__}",
                "Accept": "application/vnd.github+json",
            }
        )

    def close(self) -> None:
        self._http.close()

    def list_directory(
        self,
        owner: str,
        repo: str,
        path: str = "",
    ) -> list[RepoEntry]:
        """List one directory of a repository."""
        url = f"{self._api_base}/repos/{owner}/{repo}/contents/{path}"
        try:
            resp = self._http.get(url, timeout=self._timeout)
        except requests.RequestException as e:
            raise RepositoryError(f"Failed to fetch repository contents: {e}") from e

        if resp.status_code == 404:
            raise RepositoryError("Repository not found or is private")
        if not resp.ok:
            raise RepositoryError(f"GitHub API error: {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise RepositoryError("GitHub API returned malformed JSON") from e

        if not isinstance(data, list):
            data = [data]
        return [RepoEntry.from_api(item) for item in data if isinstance(item, dict)]

    def fetch_content(self, download_url: str) -> str:
        """Fetch the raw text of one file."""
        try:
            resp = self._http.get(download_url, timeout=self._timeout)
        except requests.RequestException as e:
            raise RepositoryError(f"Failed to fetch file: {e}") from e
        if not resp.ok:
            raise RepositoryError(f"Failed to fetch file: {resp.status_code}")
        return resp.text

    def collect_files(
        self,
        owner: str,
        repo: str,
        max_files: int = 50,
    ) -> list[RepoEntry]:
        """Breadth-first walk from the root collecting up to ``max_files`` text files.

        A failure listing the root propagates; failures listing a
        subdirectory are logged and that subtree is skipped.
        """
        files: list[RepoEntry] = []
        pending: deque[str] = deque([""])

        while pending and len(files) < max_files:
            current = pending.popleft()
            try:
                entries = self.list_directory(owner, repo, current)
            except RepositoryError as e:
                if not current:
                    raise
                logger.warning("Failed to list directory %s: %s", current, e)
                continue

            for entry in entries:
                if len(files) >= max_files:
                    break
                if entry.type == "file" and is_text_file(entry.name):
                    files.append(entry)
                elif entry.type == "dir" and not should_skip_directory(entry.name):
                    pending.append(entry.path)

        logger.info("Collected %d file(s) from %s/%s", len(files), owner, repo)
        return files
