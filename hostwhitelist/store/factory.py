"""Data bag store factory — backend selection from Config.

Backend selection:
  1. store.backend == "http" → ChefServerDataBagStore(store.server_url)
  2. Otherwise               → LocalDataBagStore(store.data_bag_path) (default)

HOSTWHITELIST_SERVER_URL switches the backend to "http" during config loading
(see config._apply_env_overrides), so the factory only reads the Config.
"""

from __future__ import annotations

from hostwhitelist.config import Config
from hostwhitelist.store.protocol import DataBagStore
from hostwhitelist.utils.logger import get_logger

logger = get_logger(__name__)


def create_data_bag_store(config: Config) -> DataBagStore:
    """Create the data bag store selected by ``config.store``.

    Raises:
        ValueError: backend is "http" but no server_url is configured.
    """
    if config.store.backend == "http":
        return _create_http_store(config)
    return _create_local_store(config)


def _create_http_store(config: Config) -> DataBagStore:
    from hostwhitelist.store.http_backend import ChefServerDataBagStore

    server_url = config.store.server_url
    if not server_url:
        raise ValueError("store.backend is 'http' but store.server_url is not set")

    store = ChefServerDataBagStore(
        base_url=server_url,
        timeout_s=config.store.timeout_s,
        headers=config.store.headers,
    )
    logger.info(
        "data_bag_store_selected",
        backend="ChefServerDataBagStore",
        # Never log header values — they may carry tokens
        server_url=store.base_url,
        timeout_s=config.store.timeout_s,
    )
    return store


def _create_local_store(config: Config) -> DataBagStore:
    from hostwhitelist.store.file_backend import LocalDataBagStore

    store = LocalDataBagStore(root=config.store.data_bag_path)
    logger.info(
        "data_bag_store_selected",
        backend="LocalDataBagStore",
        data_bag_path=store.root,
    )
    return store
