"""Config loading for hostwhitelist.

Reads `.hostwhitelist/config.yaml` (or `~/.hostwhitelist/config.yaml`).
Raises SystemExit on parse errors, a missing `version` field, or invalid values.
If no config file is found, returns default values (safe to run without config).

Config search order:
  1. `config_path` argument (if provided — for testing or explicit override)
  2. HOSTWHITELIST_CONFIG environment variable (if set)
  3. `.hostwhitelist/config.yaml` (working directory)
  4. `~/.hostwhitelist/config.yaml` (home directory)

Environment variable overrides (applied after the file, so they always win):
  HOSTWHITELIST_DATA_BAG_PATH  — overrides store.data_bag_path
  HOSTWHITELIST_SERVER_URL     — overrides store.server_url and selects the http backend
  HOSTWHITELIST_CACHE_FAILURES — overrides whitelist.cache_failures ("true"/"false")
  HOSTWHITELIST_LOG_LEVEL      — overrides logging.level
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import NoReturn, Optional

import yaml

from hostwhitelist.constants import (
    DEFAULT_DATA_BAG,
    DEFAULT_DATA_BAG_PATH,
    DEFAULT_HTTP_TIMEOUT_S,
    DEFAULT_PATTERN_ATTRIBUTE,
    ENV_CACHE_FAILURES,
    ENV_CONFIG,
    ENV_DATA_BAG_PATH,
    ENV_LOG_LEVEL,
    ENV_SERVER_URL,
)
from hostwhitelist.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

# ─── Validation sets ─────────────────────────────────────────────────────────

VALID_STORE_BACKENDS: frozenset[str] = frozenset({"file", "http"})

VALID_LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off"})

DEFAULT_CONFIG_PATHS = [
    ".hostwhitelist/config.yaml",
    os.path.expanduser("~/.hostwhitelist/config.yaml"),
]


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class StoreConfig:
    """Data bag store configuration.

    backend:       "file" (LocalDataBagStore) or "http" (ChefServerDataBagStore)
    data_bag_path: Root directory of local data bags (file backend)
    server_url:    Base URL of the data bag HTTP endpoint (http backend)
    timeout_s:     HTTP request timeout
    headers:       Static headers sent with every HTTP request
    """

    backend: str = "file"
    data_bag_path: str = DEFAULT_DATA_BAG_PATH
    server_url: Optional[str] = None
    timeout_s: float = DEFAULT_HTTP_TIMEOUT_S
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class WhitelistConfig:
    """Resolver defaults.

    cache_failures: True keeps an empty record cached after a failed fetch for
                    the rest of the run; False re-fetches on the next lookup.
    """

    data_bag: str = DEFAULT_DATA_BAG
    attribute: str = DEFAULT_PATTERN_ATTRIBUTE
    cache_failures: bool = True


@dataclass
class LoggingConfig:
    level: str = "INFO"
    json_output: bool = True


@dataclass
class Config:
    """Root configuration object populated from .hostwhitelist/config.yaml.

    All fields have safe defaults — hostwhitelist works without any config file.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    store: StoreConfig = field(default_factory=StoreConfig)
    whitelist: WhitelistConfig = field(default_factory=WhitelistConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    path: Optional[str] = None  # Path to the loaded config file

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are silently ignored.

        Raises:
            SystemExit(1): On invalid store.backend or logging.level values.
        """
        # ── Store ─────────────────────────────────────────────────────────────
        store_raw = raw.get("store") or {}
        backend = store_raw.get("backend", "file")
        if backend not in VALID_STORE_BACKENDS:
            _config_error(
                f"CONFIG ERROR: Invalid store.backend: '{backend}'. "
                f"Supported values: {sorted(VALID_STORE_BACKENDS)}."
            )
        store = StoreConfig(
            backend=backend,
            data_bag_path=store_raw.get("data_bag_path", DEFAULT_DATA_BAG_PATH),
            server_url=store_raw.get("server_url"),
            timeout_s=float(store_raw.get("timeout_s", DEFAULT_HTTP_TIMEOUT_S)),
            headers=dict(store_raw.get("headers") or {}),
        )

        # ── Whitelist ─────────────────────────────────────────────────────────
        whitelist_raw = raw.get("whitelist") or {}
        whitelist = WhitelistConfig(
            data_bag=whitelist_raw.get("data_bag", DEFAULT_DATA_BAG),
            attribute=whitelist_raw.get("attribute", DEFAULT_PATTERN_ATTRIBUTE),
            cache_failures=bool(whitelist_raw.get("cache_failures", True)),
        )

        # ── Logging ───────────────────────────────────────────────────────────
        logging_raw = raw.get("logging") or {}
        level = str(logging_raw.get("level", "INFO")).upper()
        if level not in VALID_LOG_LEVELS:
            _config_error(
                f"CONFIG ERROR: Invalid logging.level: '{level}'. "
                f"Supported values: {sorted(VALID_LOG_LEVELS)}."
            )
        logging_config = LoggingConfig(
            level=level,
            json_output=bool(logging_raw.get("json", True)),
        )

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            store=store,
            whitelist=whitelist,
            logging=logging_config,
            path=path,
        )


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate hostwhitelist configuration.

    If no file is found at any search path, returns default Config (not an error).
    If a file is found but invalid, writes an error to stderr and raises SystemExit(1).
    Environment overrides are applied in both cases.

    Raises:
        SystemExit(1): On YAML parse error, missing ``version`` field, unsupported
                       version, invalid backend / log level, an http backend with
                       no server_url, or an invalid HOSTWHITELIST_CACHE_FAILURES.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get(ENV_CONFIG)
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    # ── No config file found ─────────────────────────────────────────────────
    if found_path is None:
        logger.info("No config file found — using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        _validate(config)
        return config

    # ── Parse config file ─────────────────────────────────────────────────────
    logger.info("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        _config_error(
            f"CONFIG ERROR: Failed to parse {found_path}: {exc}\n"
            "Check the YAML syntax and try again."
        )
    except OSError as exc:
        _config_error(f"CONFIG ERROR: Could not read {found_path}: {exc}")

    if not isinstance(raw, dict):
        if raw is None:
            _config_error(
                f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        _config_error(
            f"CONFIG ERROR: {found_path} is not a valid YAML mapping.\n"
            "The config file must be a YAML dictionary at the top level."
        )

    # ── Version validation ────────────────────────────────────────────────────
    version = raw.get("version")
    if version is None:
        _config_error(
            f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
    if version not in SUPPORTED_VERSIONS:
        _config_error(
            f"CONFIG ERROR: Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )

    config = Config.from_dict(raw, path=found_path)
    _apply_env_overrides(config)
    _validate(config)

    if not config.whitelist.cache_failures:
        logger.info("Failed whitelist fetches will not be cached — each lookup retries")

    logger.info(
        "Config loaded",
        path=found_path,
        version=config.version,
        store_backend=config.store.backend,
    )
    return config


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Raises:
        SystemExit(1): If HOSTWHITELIST_CACHE_FAILURES is not a boolean string
                       or HOSTWHITELIST_LOG_LEVEL is not a known level.
    """
    env_path = os.environ.get(ENV_DATA_BAG_PATH)
    if env_path:
        config.store.data_bag_path = env_path

    env_url = os.environ.get(ENV_SERVER_URL)
    if env_url:
        config.store.server_url = env_url
        config.store.backend = "http"

    env_cache = os.environ.get(ENV_CACHE_FAILURES)
    if env_cache is not None:
        lowered = env_cache.strip().lower()
        if lowered in _TRUE_STRINGS:
            config.whitelist.cache_failures = True
        elif lowered in _FALSE_STRINGS:
            config.whitelist.cache_failures = False
        else:
            _config_error(
                f"CONFIG ERROR: {ENV_CACHE_FAILURES} environment variable is not a "
                f"valid boolean: '{env_cache}'"
            )

    env_level = os.environ.get(ENV_LOG_LEVEL)
    if env_level:
        level = env_level.upper()
        if level not in VALID_LOG_LEVELS:
            _config_error(
                f"CONFIG ERROR: {ENV_LOG_LEVEL} environment variable is not a "
                f"valid level: '{env_level}'"
            )
        config.logging.level = level


def _validate(config: Config) -> None:
    if config.store.backend == "http" and not config.store.server_url:
        _config_error(
            "CONFIG ERROR: store.backend is 'http' but store.server_url is not set.\n"
            f"Set store.server_url or the {ENV_SERVER_URL} environment variable."
        )


def _config_error(msg: str) -> NoReturn:
    print(msg, file=sys.stderr)
    raise SystemExit(1)
