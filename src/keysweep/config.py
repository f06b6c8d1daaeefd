"""Global configuration — XDG paths, optional YAML file, env vars, defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from keysweep.errors import ConfigError


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "keysweep"
    return Path.home() / ".config" / "keysweep"


# Keys a config.yaml may set, with the type each value is coerced to
_FILE_KEYS = {
    "max_repo_files": int,
    "request_timeout": float,
    "session_ttl": float,
    "github_api_base": str,
    "web_port": int,
}

_POSITIVE_KEYS = frozenset({"max_repo_files", "request_timeout"})

_ENV_KEYS = {
    "KEYSWEEP_MAX_REPO_FILES": "max_repo_files",
    "KEYSWEEP_REQUEST_TIMEOUT": "request_timeout",
    "KEYSWEEP_SESSION_TTL": "session_ttl",
    "KEYSWEEP_WEB_PORT": "web_port",
}


@dataclass
class KeySweepConfig:
    """Application-wide configuration."""

    config_dir: Path = field(default_factory=_default_config_dir)
    max_repo_files: int = 50
    request_timeout: float = 10.0
    session_ttl: float = 3600.0  # 0 keeps finished sessions forever
    github_api_base: str = "https://api.github.com"
    web_host: str = "127.0.0.1"
    web_port: int = 8471
    verbose: bool = False

    @classmethod
    def load(cls, path: str | Path | None = None) -> KeySweepConfig:
        """Load defaults, then a YAML file, then environment overrides.

        Without ``path`` the file is ``<config_dir>/config.yaml`` and is
        optional; an explicit ``path`` must exist.
        """
        config = cls()

        if path is not None:
            config._apply_file(Path(path))
        else:
            default_file = config.config_dir / "config.yaml"
            if default_file.is_file():
                config._apply_file(default_file)

        for env_name, attr in _ENV_KEYS.items():
            value = os.environ.get(env_name)
            if value:
                config._set(attr, value, source=env_name)

        return config

    def _apply_file(self, path: Path) -> None:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read config file: {e}", str(path)) from e

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}", str(path)) from e

        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigError("Config YAML must be a mapping", str(path))

        unknown = sorted(set(data) - set(_FILE_KEYS))
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}", str(path))

        for key, value in data.items():
            self._set(key, value, source=str(path))

    def _set(self, attr: str, value: object, source: str) -> None:
        try:
            coerced = _FILE_KEYS[attr](value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value for {attr}: {value!r}", source) from e
        if isinstance(coerced, (int, float)) and coerced < 0:
            raise ConfigError(f"{attr} must not be negative", source)
        if attr in _POSITIVE_KEYS and coerced == 0:
            raise ConfigError(f"{attr} must be greater than zero", source)
        setattr(self, attr, coerced)
