"""Unit tests for config file loading, validation, and env overrides.

Covers:
  #1: Missing config file → Config.defaults(), no exception
  #2: Missing 'version' field → SystemExit(1) with human-readable message
  #3: Unknown version → SystemExit(1)
  #4: Invalid YAML syntax → SystemExit(1)
  #5: Full file populates store / whitelist / logging sections
  #6: Invalid store.backend / logging.level → SystemExit(1)
  #7: http backend without server_url → SystemExit(1)
  #8: Env overrides (data bag path, server url, cache failures, log level)
  #9: HOSTWHITELIST_CONFIG env var support
"""

from __future__ import annotations

import os
import textwrap

import pytest

from hostwhitelist.config import (
    SUPPORTED_VERSIONS,
    VALID_STORE_BACKENDS,
    Config,
    LoggingConfig,
    StoreConfig,
    WhitelistConfig,
    load_config,
)
from hostwhitelist.constants import (
    DEFAULT_DATA_BAG,
    DEFAULT_DATA_BAG_PATH,
    DEFAULT_HTTP_TIMEOUT_S,
    DEFAULT_PATTERN_ATTRIBUTE,
)


def _write_config(tmp_path, content: str) -> str:
    path = os.path.join(str(tmp_path), "config.yaml")
    with open(path, "w") as f:
        f.write(textwrap.dedent(content))
    return path


# ─── #1: Missing config file ─────────────────────────────────────────────────


class TestMissingConfigFile:
    def test_nonexistent_path_returns_defaults(self) -> None:
        config = load_config(config_path="/nonexistent/path/to/config.yaml")
        assert isinstance(config, Config)
        assert config.version == 1
        assert config.path is None

    def test_defaults(self) -> None:
        config = load_config(config_path="/nonexistent/path/config.yaml")
        assert config.store == StoreConfig()
        assert config.store.backend == "file"
        assert config.store.data_bag_path == DEFAULT_DATA_BAG_PATH
        assert config.store.timeout_s == DEFAULT_HTTP_TIMEOUT_S
        assert config.whitelist == WhitelistConfig()
        assert config.whitelist.data_bag == DEFAULT_DATA_BAG
        assert config.whitelist.attribute == DEFAULT_PATTERN_ATTRIBUTE
        assert config.whitelist.cache_failures is True
        assert config.logging == LoggingConfig()

    def test_defaults_classmethod(self) -> None:
        assert Config.defaults() == Config()


# ─── #2-#4: Invalid files ────────────────────────────────────────────────────


class TestInvalidFiles:
    def test_missing_version_exits(self, tmp_path, capsys) -> None:
        path = _write_config(tmp_path, "store:\n  backend: file\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(config_path=path)
        assert exc_info.value.code == 1
        assert "version" in capsys.readouterr().err

    def test_empty_file_exits(self, tmp_path) -> None:
        path = _write_config(tmp_path, "")
        with pytest.raises(SystemExit):
            load_config(config_path=path)

    def test_non_mapping_exits(self, tmp_path, capsys) -> None:
        path = _write_config(tmp_path, "- just\n- a list\n")
        with pytest.raises(SystemExit):
            load_config(config_path=path)
        assert "mapping" in capsys.readouterr().err

    def test_unsupported_version_exits(self, tmp_path, capsys) -> None:
        path = _write_config(tmp_path, "version: 2\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(config_path=path)
        assert exc_info.value.code == 1
        assert "Unsupported config version" in capsys.readouterr().err

    def test_invalid_yaml_exits(self, tmp_path, capsys) -> None:
        path = _write_config(tmp_path, "version: 1\nstore: [unclosed\n")
        with pytest.raises(SystemExit):
            load_config(config_path=path)
        assert "Failed to parse" in capsys.readouterr().err

    def test_supported_versions(self) -> None:
        assert SUPPORTED_VERSIONS == frozenset({1})


# ─── #5-#7: Sections ─────────────────────────────────────────────────────────


class TestSections:
    def test_full_file(self, tmp_path) -> None:
        path = _write_config(
            tmp_path,
            """
            version: 1
            store:
              backend: http
              server_url: https://chef.example.com/organizations/acme
              timeout_s: 2.5
              headers:
                X-Gateway-Token: abc
            whitelist:
              data_bag: access
              attribute: hosts
              cache_failures: false
            logging:
              level: debug
              json: false
            """,
        )
        config = load_config(config_path=path)

        assert config.path == path
        assert config.store.backend == "http"
        assert config.store.server_url == "https://chef.example.com/organizations/acme"
        assert config.store.timeout_s == 2.5
        assert config.store.headers == {"X-Gateway-Token": "abc"}
        assert config.whitelist.data_bag == "access"
        assert config.whitelist.attribute == "hosts"
        assert config.whitelist.cache_failures is False
        assert config.logging.level == "DEBUG"
        assert config.logging.json_output is False

    def test_version_only_populates_defaults(self, tmp_path) -> None:
        path = _write_config(tmp_path, "version: 1\n")
        config = load_config(config_path=path)
        assert config.store == StoreConfig()
        assert config.whitelist == WhitelistConfig()

    def test_null_sections_use_defaults(self, tmp_path) -> None:
        path = _write_config(tmp_path, "version: 1\nstore:\nwhitelist:\n")
        config = load_config(config_path=path)
        assert config.store.backend == "file"

    def test_invalid_backend_exits(self, tmp_path, capsys) -> None:
        path = _write_config(tmp_path, "version: 1\nstore:\n  backend: s3\n")
        with pytest.raises(SystemExit):
            load_config(config_path=path)
        assert "store.backend" in capsys.readouterr().err

    def test_valid_backends(self) -> None:
        assert VALID_STORE_BACKENDS == frozenset({"file", "http"})

    def test_invalid_log_level_exits(self, tmp_path) -> None:
        path = _write_config(tmp_path, "version: 1\nlogging:\n  level: chatty\n")
        with pytest.raises(SystemExit):
            load_config(config_path=path)

    def test_http_backend_without_url_exits(self, tmp_path, capsys) -> None:
        path = _write_config(tmp_path, "version: 1\nstore:\n  backend: http\n")
        with pytest.raises(SystemExit):
            load_config(config_path=path)
        assert "server_url" in capsys.readouterr().err


# ─── #8-#9: Environment ──────────────────────────────────────────────────────


class TestEnvironment:
    def test_data_bag_path_override(self, monkeypatch) -> None:
        monkeypatch.setenv("HOSTWHITELIST_DATA_BAG_PATH", "/srv/data_bags")
        config = load_config(config_path="/nonexistent/config.yaml")
        assert config.store.data_bag_path == "/srv/data_bags"

    def test_server_url_override_selects_http(self, monkeypatch) -> None:
        monkeypatch.setenv("HOSTWHITELIST_SERVER_URL", "http://localhost:8889")
        config = load_config(config_path="/nonexistent/config.yaml")
        assert config.store.backend == "http"
        assert config.store.server_url == "http://localhost:8889"

    def test_env_wins_over_file(self, tmp_path, monkeypatch) -> None:
        path = _write_config(tmp_path, "version: 1\nstore:\n  data_bag_path: ./from-file\n")
        monkeypatch.setenv("HOSTWHITELIST_DATA_BAG_PATH", "./from-env")
        config = load_config(config_path=path)
        assert config.store.data_bag_path == "./from-env"

    @pytest.mark.parametrize("value,expected", [("false", False), ("0", False), ("TRUE", True), ("yes", True)])
    def test_cache_failures_override(self, monkeypatch, value, expected) -> None:
        monkeypatch.setenv("HOSTWHITELIST_CACHE_FAILURES", value)
        config = load_config(config_path="/nonexistent/config.yaml")
        assert config.whitelist.cache_failures is expected

    def test_invalid_cache_failures_exits(self, monkeypatch, capsys) -> None:
        monkeypatch.setenv("HOSTWHITELIST_CACHE_FAILURES", "sometimes")
        with pytest.raises(SystemExit):
            load_config(config_path="/nonexistent/config.yaml")
        assert "HOSTWHITELIST_CACHE_FAILURES" in capsys.readouterr().err

    def test_log_level_override(self, monkeypatch) -> None:
        monkeypatch.setenv("HOSTWHITELIST_LOG_LEVEL", "warning")
        config = load_config(config_path="/nonexistent/config.yaml")
        assert config.logging.level == "WARNING"

    def test_invalid_log_level_override_exits(self, monkeypatch) -> None:
        monkeypatch.setenv("HOSTWHITELIST_LOG_LEVEL", "loud")
        with pytest.raises(SystemExit):
            load_config(config_path="/nonexistent/config.yaml")

    def test_config_env_var(self, tmp_path, monkeypatch) -> None:
        path = _write_config(tmp_path, "version: 1\nwhitelist:\n  data_bag: from_env_config\n")
        monkeypatch.setenv("HOSTWHITELIST_CONFIG", path)
        config = load_config()
        assert config.whitelist.data_bag == "from_env_config"
        assert config.path == path

    def test_explicit_path_wins_over_env_var(self, tmp_path, monkeypatch) -> None:
        explicit_dir = tmp_path / "explicit"
        env_dir = tmp_path / "env"
        explicit_dir.mkdir()
        env_dir.mkdir()
        explicit = _write_config(explicit_dir, "version: 1\nwhitelist:\n  data_bag: explicit\n")
        from_env = _write_config(env_dir, "version: 1\nwhitelist:\n  data_bag: env\n")
        monkeypatch.setenv("HOSTWHITELIST_CONFIG", from_env)
        config = load_config(config_path=explicit)
        assert config.whitelist.data_bag == "explicit"
