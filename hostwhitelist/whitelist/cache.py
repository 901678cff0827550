"""Run-scoped resolution cache for whitelist records.

A configuration run typically asks about the same whitelist many times. The
first lookup of a (data_bag, whitelist_id) pair fetches the item from the
store; every later lookup in the same run is served from this cache.
Entries never expire — a new run gets a new cache (see run_scope()).

Thread-safety:
    A threading.Lock guards the record map. Each key also gets its own lock,
    held while its loader runs, so concurrent first lookups of one key
    perform exactly one fetch while lookups of other keys proceed.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Optional

from hostwhitelist.models.record import WhitelistRecord
from hostwhitelist.utils.logger import bind_run_id, get_logger, reset_run_id
from hostwhitelist.utils.ulid import generate_ulid

logger = get_logger(__name__)

CacheKey = tuple[str, str]
"""(data_bag, whitelist_id)"""

Loader = Callable[[], tuple[WhitelistRecord, bool]]
"""Returns (record, cacheable). A non-cacheable record is returned but not stored."""


class ResolutionCache:
    """Mapping of (data_bag, whitelist_id) to WhitelistRecord for one run.

    Usage:
        cache = ResolutionCache()
        resolver = WhitelistResolver(subject, store, cache=cache)
        ...
        cache.clear()  # or drop the cache when the run ends
    """

    def __init__(self, run_id: Optional[str] = None) -> None:
        self._run_id = run_id
        self._records: dict[CacheKey, WhitelistRecord] = {}
        self._key_locks: dict[CacheKey, threading.Lock] = {}
        self._lock = threading.Lock()

    @property
    def run_id(self) -> Optional[str]:
        return self._run_id

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._records

    def get(self, data_bag: str, whitelist_id: str) -> Optional[WhitelistRecord]:
        """Return the cached record, or None on a miss (no I/O)."""
        with self._lock:
            return self._records.get((data_bag, whitelist_id))

    def get_or_load(self, data_bag: str, whitelist_id: str, loader: Loader) -> WhitelistRecord:
        """Return the cached record, calling `loader` at most once per key on a miss.

        If the loader reports its record as not cacheable, the record is
        returned to this caller only and the next lookup calls a loader again.
        """
        key = (data_bag, whitelist_id)
        with self._lock:
            record = self._records.get(key)
            if record is not None:
                logger.debug("Whitelist cache hit", data_bag=data_bag, whitelist=whitelist_id)
                return record
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            # Another thread may have loaded the key while we waited.
            with self._lock:
                record = self._records.get(key)
            if record is not None:
                return record

            record, cacheable = loader()
            if cacheable:
                with self._lock:
                    self._records[key] = record
            return record

    def clear(self) -> None:
        """Drop every cached record."""
        with self._lock:
            self._records.clear()
            self._key_locks.clear()


@contextmanager
def run_scope(run_id: Optional[str] = None) -> Iterator[ResolutionCache]:
    """Yield a fresh ResolutionCache for one configuration run.

    The run_id (a new ULID unless given) is bound into every log entry
    emitted inside the block. On exit the cache is cleared and the
    previously active run id, if any, is restored.
    """
    run_id = run_id or generate_ulid()
    cache = ResolutionCache(run_id=run_id)
    token = bind_run_id(run_id)
    logger.debug("Whitelist run started", run_id=run_id)
    try:
        yield cache
    finally:
        logger.debug("Whitelist run finished", run_id=run_id, cached=len(cache))
        cache.clear()
        reset_run_id(token)
