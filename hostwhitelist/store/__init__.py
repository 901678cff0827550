"""hostwhitelist data bag store package.

Re-exports the public API for ergonomic imports:

    from hostwhitelist.store import DataBagStore, FetchFailure, InMemoryDataBagStore

Layout:
    protocol.py     — DataBagStore Protocol + FetchFailure hierarchy + InMemoryDataBagStore
    file_backend.py — LocalDataBagStore (yaml.safe_load over data_bags/<bag>/<item>.json)
    http_backend.py — ChefServerDataBagStore (httpx.Client, 404 → not found)
    factory.py      — create_data_bag_store() — backend selection by Config
"""

from hostwhitelist.store.protocol import (
    DataBagItemNotFound,
    DataBagStore,
    DataBagStoreUnavailable,
    FetchFailure,
    InMemoryDataBagStore,
    InvalidDataBagName,
)

__all__ = [
    # Errors
    "FetchFailure",
    "DataBagItemNotFound",
    "DataBagStoreUnavailable",
    "InvalidDataBagName",
    # Protocol + implementations
    "DataBagStore",
    "InMemoryDataBagStore",
]
