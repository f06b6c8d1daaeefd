"""keysweep exceptions."""

from __future__ import annotations


class InvalidScanRequest(ValueError):
    """Raised when a scan request is rejected before the scan starts."""


class InvalidRepoUrl(InvalidScanRequest):
    """Raised when a repository reference is neither a GitHub URL nor owner/repo."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Invalid GitHub repository URL: {url!r}")


class RepositoryError(RuntimeError):
    """Raised when the repository host cannot list or serve content."""


class ScanNotFound(KeyError):
    """Raised when a scan id is unknown or has expired."""

    def __init__(self, scan_id: str) -> None:
        self.scan_id = scan_id
        super().__init__(scan_id)

    def __str__(self) -> str:
        return f"Scan not found: {self.scan_id}"


class ConfigError(ValueError):
    """Raised when a configuration file is malformed."""

    def __init__(self, message: str, config_path: str | None = None) -> None:
        self.config_path = config_path
        super().__init__(message)

    def __str__(self) -> str:
        msg = super().__str__()
        if self.config_path:
            msg += f" (config: {self.config_path})"
        return msg
