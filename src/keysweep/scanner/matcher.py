"""Per-file matcher — sensitive filenames plus line-by-line signature matching."""

from __future__ import annotations

import logging

from keysweep.scanner.models import SENSITIVE_FILE_TYPE, Match, Severity
from keysweep.scanner.patterns import SENSITIVE_FILENAMES, SIGNATURES

logger = logging.getLogger(__name__)


def detect_sensitive_filename(
    file_name: str,
    seen: set[str] | None = None,
) -> list[Match]:
    """Flag a path that ends with or contains a known-sensitive file name.

    One finding per distinct sensitive name, always on line 1 with high
    severity. ``seen`` is the caller's dedup set and is updated in place.
    """
    if seen is None:
        seen = set()

    matches: list[Match] = []
    for sensitive in SENSITIVE_FILENAMES:
        if not (file_name.endswith(sensitive) or sensitive in file_name):
            continue
        key = f"{SENSITIVE_FILE_TYPE}:{sensitive}"
        if key in seen:
            continue
        seen.add(key)
        matches.append(
            Match(
                file=file_name,
                type=SENSITIVE_FILE_TYPE,
                matched_text=sensitive,
                line=1,
                severity=Severity.HIGH,
            )
        )
    return matches


def scan_content(file_name: str, content: str) -> list[Match]:
    """Scan one file's text and return its deduplicated matches.

    The same (type, matched text) pair is reported once per file, on the
    line where it first occurs.
    """
    seen: set[str] = set()
    matches = detect_sensitive_filename(file_name, seen)

    for line_num, line in enumerate(content.split("\n"), start=1):
        for signature in SIGNATURES:
            for found in signature.regex.finditer(line):
                matched_text = found.group(0)
                key = f"{signature.name}:{matched_text}"
                if key in seen:
                    continue
                seen.add(key)
                matches.append(
                    Match(
                        file=file_name,
                        type=signature.name,
                        matched_text=matched_text,
                        line=line_num,
                        severity=signature.severity,
                    )
                )

    logger.debug("%s: %d match(es)", file_name, len(matches))
    return matches
