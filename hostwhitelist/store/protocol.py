"""DataBagStore Protocol + fetch errors + InMemoryDataBagStore.

A data bag store is the read side of the configuration-management system:
it returns one item (a JSON document) of a named data bag. hostwhitelist
never writes to a store.

Layout:
    protocol.py     — DataBagStore Protocol + FetchFailure hierarchy + InMemoryDataBagStore
    file_backend.py — LocalDataBagStore (data_bags/<bag>/<item>.json on disk)
    http_backend.py — ChefServerDataBagStore (GET /data/<bag>/<item> via httpx)
    factory.py      — create_data_bag_store() — backend selection by Config
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Protocol, runtime_checkable

import re2  # google-re2. NEVER: import re

from hostwhitelist.constants import DATA_BAG_NAME_PATTERN
from hostwhitelist.models.record import WhitelistError
from hostwhitelist.utils.logger import get_logger

logger = get_logger(__name__)

_NAME_RE = re2.compile(DATA_BAG_NAME_PATTERN)


# ─── Fetch errors ────────────────────────────────────────────────────────────


class FetchFailure(WhitelistError):
    """A data bag item could not be fetched from the store."""

    def __init__(self, data_bag: str, item_id: str, reason: str = "") -> None:
        self.data_bag = data_bag
        self.item_id = item_id
        self.reason = reason
        message = f"Could not fetch data bag item '{data_bag}/{item_id}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DataBagItemNotFound(FetchFailure):
    """The data bag or the item does not exist."""


class DataBagStoreUnavailable(FetchFailure):
    """The store could not be read (I/O, connection, timeout, bad payload)."""


class InvalidDataBagName(FetchFailure):
    """The data bag or item name contains characters a store cannot address."""


def validate_names(data_bag: str, item_id: str) -> None:
    """Reject names that are empty, contain path separators, or start with a dot.

    Raises:
        InvalidDataBagName: if either name is not addressable.
    """
    for name in (data_bag, item_id):
        if not isinstance(name, str) or not _NAME_RE.match(name):
            raise InvalidDataBagName(
                str(data_bag), str(item_id), f"invalid name {name!r}"
            )


# ─── DataBagStore Protocol ───────────────────────────────────────────────────


@runtime_checkable
class DataBagStore(Protocol):
    """Pluggable data bag reader interface.

    Implementations: LocalDataBagStore (default), ChefServerDataBagStore,
    InMemoryDataBagStore. Selection via create_data_bag_store() (store/factory.py).

    fetch_item() is synchronous and blocking. It raises a FetchFailure subclass
    when the item cannot be returned; it never returns None.
    """

    def fetch_item(self, data_bag: str, item_id: str) -> Mapping[str, Any]:
        """Return the raw item document.

        Raises:
            DataBagItemNotFound:     bag or item missing.
            DataBagStoreUnavailable: store unreachable or payload unreadable.
            InvalidDataBagName:      name cannot be addressed.
        """
        ...


# ─── InMemoryDataBagStore ────────────────────────────────────────────────────


class InMemoryDataBagStore:
    """Dict-backed DataBagStore.

    Used in tests and by callers that already hold their data bags in memory.
    fetch_count records how many fetches reached the store, which is how the
    resolution cache's at-most-once behaviour is observed.

    Usage:
        store = InMemoryDataBagStore({"whitelist": {"web": {"patterns": ["*.example.com"]}}})
        store.fetch_item("whitelist", "web")
    """

    def __init__(self, data_bags: Optional[Mapping[str, Mapping[str, Any]]] = None) -> None:
        self._data_bags: dict[str, dict[str, Any]] = {
            bag: dict(items) for bag, items in (data_bags or {}).items()
        }
        self.fetch_count = 0

    def add_item(self, data_bag: str, item_id: str, item: Any) -> None:
        self._data_bags.setdefault(data_bag, {})[item_id] = item

    def fetch_item(self, data_bag: str, item_id: str) -> Mapping[str, Any]:
        self.fetch_count += 1
        validate_names(data_bag, item_id)

        items = self._data_bags.get(data_bag)
        if items is None:
            raise DataBagItemNotFound(data_bag, item_id, "no such data bag")
        if item_id not in items:
            raise DataBagItemNotFound(data_bag, item_id, "no such item")

        logger.debug("In-memory data bag item fetched", data_bag=data_bag, item_id=item_id)
        return items[item_id]


# ─── Protocol compliance assertion ────────────────────────────────────────────
# InMemoryDataBagStore must satisfy DataBagStore protocol.
# This assertion runs at import time — catches protocol drift immediately.
assert isinstance(InMemoryDataBagStore(), DataBagStore), (
    "InMemoryDataBagStore does not satisfy DataBagStore protocol — implementation error"
)
