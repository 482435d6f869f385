"""Shared fixtures for lslocator tests."""

from __future__ import annotations

import pathlib

import pytest

from lslocator.config import CONFIG_ENV_VAR, LocatorSettings
from lslocator.models import DiscoveryConfig


@pytest.fixture
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: pathlib.Path) -> None:
    """Keep the user's real settings file out of the test."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.setattr(
        "lslocator.config.DEFAULT_CONFIG_PATH", tmp_path / "no-such-config.yaml",
    )


@pytest.fixture
def fast_settings() -> LocatorSettings:
    """Linux settings with a single attempt and no backoff."""
    return LocatorSettings(
        process_name="language_server_linux_x64",
        retry=DiscoveryConfig(attempts=1, base_delay_ms=0),
    )


@pytest.fixture
def config_file(tmp_path: pathlib.Path) -> pathlib.Path:
    """A valid settings file overriding a few fields."""
    path = tmp_path / "config.yaml"
    path.write_text(
        "product_name: antigravity\n"
        "probe_timeout: 1.5\n"
        "ambient_fallback: false\n"
        "retry:\n"
        "  attempts: 5\n"
        "  base_delay_ms: 250\n"
    )
    return path
