"""Shared constants for hostwhitelist.

Data bag defaults, record keys, and environment variable names used across
modules are defined here. No magic strings in other modules — import from here.
"""

# ─── Data bag defaults ───────────────────────────────────────────────────────

# Data bag holding whitelist items when the caller does not name one.
DEFAULT_DATA_BAG: str = "whitelist"

# Item key holding the hostname glob list when the caller does not name one.
DEFAULT_PATTERN_ATTRIBUTE: str = "patterns"

# Item key holding the optional role list. Absent and empty are different:
# absent skips the role search, empty runs it and finds nothing.
ROLES_KEY: str = "roles"

# ─── Store defaults ──────────────────────────────────────────────────────────

# Directory of local data bags: <path>/<bag>/<item>.json
DEFAULT_DATA_BAG_PATH: str = "data_bags"

# File extensions tried, in order, when reading a local data bag item.
DATA_BAG_ITEM_EXTENSIONS: tuple[str, ...] = (".json", ".yaml", ".yml")

# Request timeout for the HTTP data bag store (seconds).
DEFAULT_HTTP_TIMEOUT_S: float = 5.0

# Allowed data bag and item names. No path separators, never a leading dot.
DATA_BAG_NAME_PATTERN: str = r"^[A-Za-z0-9_\-][A-Za-z0-9_.\-]*$"

# ─── Environment variables ───────────────────────────────────────────────────

ENV_CONFIG = "HOSTWHITELIST_CONFIG"
ENV_DATA_BAG_PATH = "HOSTWHITELIST_DATA_BAG_PATH"
ENV_SERVER_URL = "HOSTWHITELIST_SERVER_URL"
ENV_CACHE_FAILURES = "HOSTWHITELIST_CACHE_FAILURES"
ENV_LOG_LEVEL = "HOSTWHITELIST_LOG_LEVEL"
