"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from keysweep.config import KeySweepConfig
from keysweep.session.manager import ScanService
from keysweep.sources.github import GitHubClient


@pytest.fixture
def config(tmp_path) -> KeySweepConfig:
    return KeySweepConfig(config_dir=tmp_path / "config", session_ttl=0)


@pytest.fixture
def github() -> MagicMock:
    return MagicMock(spec=GitHubClient)


@pytest.fixture
def service(config: KeySweepConfig, github: MagicMock) -> ScanService:
    return ScanService(config, github=github)
