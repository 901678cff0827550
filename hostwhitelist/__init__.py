"""hostwhitelist — host membership checks against data bag whitelists.

Public API:

    from hostwhitelist import NodeSubject, create_resolver, run_scope

    subject = NodeSubject.from_node_data(node_json)
    with run_scope() as cache:
        resolver = create_resolver(subject, cache=cache)
        resolver.is_in_whitelist("my_whitelist")

A whitelist is a data bag item:

    {"id": "my_whitelist", "patterns": ["*.example.com"], "roles": ["Webserver"]}
"""

from __future__ import annotations

from typing import Optional

from hostwhitelist.config import Config, load_config
from hostwhitelist.models.record import MalformedRecord, WhitelistError, WhitelistRecord
from hostwhitelist.models.subject import NodeSubject, Subject
from hostwhitelist.store.factory import create_data_bag_store
from hostwhitelist.store.protocol import DataBagStore, FetchFailure
from hostwhitelist.utils.logger import configure_logging
from hostwhitelist.whitelist.cache import ResolutionCache, run_scope
from hostwhitelist.whitelist.resolver import WhitelistResolver

__all__ = [
    "Config",
    "DataBagStore",
    "FetchFailure",
    "MalformedRecord",
    "NodeSubject",
    "ResolutionCache",
    "Subject",
    "WhitelistError",
    "WhitelistRecord",
    "WhitelistResolver",
    "create_resolver",
    "is_in_whitelist",
    "load_config",
    "run_scope",
]


def create_resolver(
    subject: Subject,
    config: Optional[Config] = None,
    cache: Optional[ResolutionCache] = None,
    store: Optional[DataBagStore] = None,
) -> WhitelistResolver:
    """Build a WhitelistResolver from configuration.

    When no config is passed, it is loaded with load_config() and logging is
    configured from it. When no store is passed, one is created from the config.
    """
    if config is None:
        config = load_config()
        configure_logging(config.logging.level, json_output=config.logging.json_output)
    if store is None:
        store = create_data_bag_store(config)
    return WhitelistResolver(
        subject,
        store,
        cache=cache,
        cache_failures=config.whitelist.cache_failures,
    )


def is_in_whitelist(
    subject: Subject,
    whitelist_id: str,
    data_bag: Optional[str] = None,
    attribute: Optional[str] = None,
    config: Optional[Config] = None,
    cache: Optional[ResolutionCache] = None,
    store: Optional[DataBagStore] = None,
) -> bool:
    """One-shot membership check.

    data_bag and attribute default to the configured whitelist.data_bag and
    whitelist.attribute. Pass the run's cache to share fetched records
    between calls.
    """
    if config is None:
        config = load_config()
    resolver = create_resolver(subject, config=config, cache=cache, store=store)
    return resolver.is_in_whitelist(
        whitelist_id,
        data_bag=data_bag or config.whitelist.data_bag,
        attribute=attribute or config.whitelist.attribute,
    )
