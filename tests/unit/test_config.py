"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from keysweep.config import KeySweepConfig
from keysweep.errors import ConfigError


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in (
        "KEYSWEEP_MAX_REPO_FILES",
        "KEYSWEEP_REQUEST_TIMEOUT",
        "KEYSWEEP_SESSION_TTL",
        "KEYSWEEP_WEB_PORT",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path: Path):
    config = KeySweepConfig.load()
    assert config.config_dir == tmp_path / "xdg" / "keysweep"
    assert config.max_repo_files == 50
    assert config.request_timeout == 10.0
    assert config.session_ttl == 3600.0
    assert config.web_host == "127.0.0.1"
    assert config.web_port == 8471


def test_default_file_picked_up(tmp_path: Path):
    config_dir = tmp_path / "xdg" / "keysweep"
    config_dir.mkdir(parents=True)
    (config_dir / "config.yaml").write_text("max_repo_files: 100\nsession_ttl: 0\n")

    config = KeySweepConfig.load()
    assert config.max_repo_files == 100
    assert config.session_ttl == 0.0


def test_explicit_file(tmp_path: Path):
    path = tmp_path / "custom.yaml"
    path.write_text("request_timeout: 2.5\nweb_port: 9000\n")
    config = KeySweepConfig.load(path)
    assert config.request_timeout == 2.5
    assert config.web_port == 9000


def test_empty_file(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert KeySweepConfig.load(path).max_repo_files == 50


def test_env_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    path = tmp_path / "custom.yaml"
    path.write_text("max_repo_files: 20\n")
    monkeypatch.setenv("KEYSWEEP_MAX_REPO_FILES", "75")
    monkeypatch.setenv("KEYSWEEP_WEB_PORT", "9100")
    config = KeySweepConfig.load(path)
    assert config.max_repo_files == 75
    assert config.web_port == 9100


def test_unknown_key_rejected(tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("max_files: 10\n")
    with pytest.raises(ConfigError, match="Unknown config keys: max_files"):
        KeySweepConfig.load(path)


def test_non_mapping_rejected(tmp_path: Path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ConfigError, match="mapping"):
        KeySweepConfig.load(path)


def test_invalid_yaml(tmp_path: Path):
    path = tmp_path / "broken.yaml"
    path.write_text("max_repo_files: [1, 2\n")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        KeySweepConfig.load(path)


def test_invalid_value(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("KEYSWEEP_REQUEST_TIMEOUT", "soon")
    with pytest.raises(ConfigError, match="request_timeout"):
        KeySweepConfig.load()


def test_negative_value(tmp_path: Path):
    path = tmp_path / "neg.yaml"
    path.write_text("session_ttl: -1\n")
    with pytest.raises(ConfigError, match="negative"):
        KeySweepConfig.load(path)


@pytest.mark.parametrize("key", ["request_timeout", "max_repo_files"])
def test_zero_rejected(tmp_path: Path, key: str):
    path = tmp_path / "zero.yaml"
    path.write_text(f"{key}: 0\n")
    with pytest.raises(ConfigError, match=f"{key} must be greater than zero"):
        KeySweepConfig.load(path)


def test_zero_timeout_from_env_rejected(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("KEYSWEEP_REQUEST_TIMEOUT", "0")
    with pytest.raises(ConfigError, match="request_timeout must be greater than zero"):
        KeySweepConfig.load()


def test_missing_explicit_file(tmp_path: Path):
    with pytest.raises(ConfigError, match="Cannot read"):
        KeySweepConfig.load(tmp_path / "nope.yaml")
