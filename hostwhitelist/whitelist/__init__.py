"""hostwhitelist whitelist resolution.

Public API:
    WhitelistResolver — is_in_whitelist() / search_roles() / load_record()
    ResolutionCache   — run-scoped record cache
    run_scope         — context manager yielding a fresh cache per run
"""
from hostwhitelist.whitelist.cache import ResolutionCache, run_scope
from hostwhitelist.whitelist.resolver import WhitelistResolver

__all__ = ["ResolutionCache", "WhitelistResolver", "run_scope"]
