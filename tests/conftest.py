"""Root test configuration for hostwhitelist.

Clears every HOSTWHITELIST_* environment variable for the whole suite so a
developer's shell (or a config file pointed to by HOSTWHITELIST_CONFIG) never
leaks into config, factory, or resolver tests.

Tests that exercise env overrides set them with their own monkeypatch calls.
"""

import pytest

from hostwhitelist.constants import (
    ENV_CACHE_FAILURES,
    ENV_CONFIG,
    ENV_DATA_BAG_PATH,
    ENV_LOG_LEVEL,
    ENV_SERVER_URL,
)


@pytest.fixture(autouse=True)
def clear_hostwhitelist_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (ENV_CONFIG, ENV_DATA_BAG_PATH, ENV_SERVER_URL, ENV_CACHE_FAILURES, ENV_LOG_LEVEL):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def isolate_default_config_paths(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Point the default config search paths at an empty temp dir."""
    monkeypatch.setattr(
        "hostwhitelist.config.DEFAULT_CONFIG_PATHS",
        [str(tmp_path / ".hostwhitelist" / "config.yaml")],
    )
