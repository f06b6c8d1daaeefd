"""Local upload collector — turns paths on disk into an upload batch."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from keysweep.scanner.matcher import detect_sensitive_filename
from keysweep.scanner.patterns import SENSITIVE_FILENAMES
from keysweep.session.models import UploadedFile
from keysweep.sources.github import should_skip_directory

logger = logging.getLogger(__name__)

_UPLOAD_EXTENSIONS = (
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
)

# 10 MiB per file
MAX_UPLOAD_SIZE = 10 * 1024 * 1024

# Hidden directories that hold a sensitive file, e.g. .aws/credentials
_SENSITIVE_DIRS = frozenset(
    name.split("/", 1)[0] for name in SENSITIVE_FILENAMES if "/" in name
)


def is_uploadable(path: Path) -> bool:
    """Extension allow-list, ``.env*`` names, or a known-sensitive file name,
    within the size cap.
    """
    name = path.name.lower()
    allowed = (
        name.endswith(_UPLOAD_EXTENSIONS)
        or name.startswith(".env")
        or bool(detect_sensitive_filename("/".join(path.parts[-2:])))
    )
    if not allowed:
        return False
    try:
        return path.stat().st_size <= MAX_UPLOAD_SIZE
    except OSError:
        return False


def collect_uploads(paths: list[str | Path]) -> list[UploadedFile]:
    """Read every uploadable file under ``paths`` in a stable order.

    Directories are walked recursively, pruning build and VCS directories.
    Files that cannot be read are logged and left out of the batch.
    """
    uploads: list[UploadedFile] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            candidates = _walk(path)
        else:
            candidates = [path]

        for file_path in candidates:
            if not is_uploadable(file_path):
                logger.debug("Not uploadable: %s", file_path)
                continue
            try:
                content = file_path.read_bytes()
            except OSError as e:
                logger.warning("Skipping %s: %s", file_path, e)
                continue
            uploads.append(UploadedFile(name=str(file_path), content=content))

    return uploads


def _walk(directory: Path) -> list[Path]:
    found: list[Path] = []
    for root, dirs, files in os.walk(directory):
        dirs[:] = sorted(
            d for d in dirs if d in _SENSITIVE_DIRS or not should_skip_directory(d)
        )
        for name in sorted(files):
            found.append(Path(root) / name)
    return found
