"""WhitelistResolver — is this host in a named whitelist?

is_in_whitelist() is the ONLY entry point policy code should call.

Resolution order for one lookup:
  1. Load the whitelist record (run cache first, then the data bag store).
  2. Glob-match the host FQDN against the record's patterns, in order.
     First match → True.
  3. If the record has a `roles` key, search the host's roles, in order.
     First held role → True. (`roles: []` searches and finds nothing;
     no `roles` key skips the search.)
  4. Otherwise → False.

INVARIANT:
  - Store and record errors NEVER reach the caller. A FetchFailure or a
    MalformedRecord is logged at ERROR level and the lookup proceeds with an
    empty record (no patterns, no roles key), which yields False.
  - With cache_failures=True (default) that empty record is cached for the
    rest of the run, so a transient store error keeps answering False until
    the run ends. With cache_failures=False the next lookup fetches again.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional, Union

from hostwhitelist.constants import DEFAULT_DATA_BAG, DEFAULT_PATTERN_ATTRIBUTE
from hostwhitelist.models.record import MalformedRecord, WhitelistRecord
from hostwhitelist.models.subject import Subject
from hostwhitelist.store.protocol import DataBagStore, FetchFailure
from hostwhitelist.utils.logger import get_logger
from hostwhitelist.whitelist.cache import ResolutionCache
from hostwhitelist.whitelist import matcher

logger = get_logger(__name__)


class WhitelistResolver:
    """Whitelist membership checks for one subject.

    Usage:
        with run_scope() as cache:
            resolver = WhitelistResolver(subject, store, cache=cache)
            if resolver.is_in_whitelist("my_whitelist"):
                ...

    The cache belongs to the caller's run. Resolvers for different subjects
    in the same run may share one cache; records do not depend on the subject.
    """

    def __init__(
        self,
        subject: Subject,
        store: DataBagStore,
        cache: Optional[ResolutionCache] = None,
        cache_failures: bool = True,
    ) -> None:
        self._subject = subject
        self._store = store
        self._cache = cache if cache is not None else ResolutionCache()
        self._cache_failures = cache_failures

    @property
    def subject(self) -> Subject:
        return self._subject

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    # ── Public API ────────────────────────────────────────────────────────────

    def is_in_whitelist(
        self,
        whitelist_id: str,
        data_bag: str = DEFAULT_DATA_BAG,
        attribute: str = DEFAULT_PATTERN_ATTRIBUTE,
    ) -> bool:
        """Return True if the subject's FQDN or roles put it in `whitelist_id`.

        Args:
            whitelist_id: Data bag item naming the whitelist.
            data_bag:     Data bag holding the item (default "whitelist").
            attribute:    Item key holding the glob list (default "patterns").

        Raises:
            ValueError: whitelist_id is empty or not a string.
        """
        if not isinstance(whitelist_id, str) or not whitelist_id:
            raise ValueError("whitelist_id must be a non-empty string")

        fqdn = self._subject.fqdn
        record = self.load_record(whitelist_id, data_bag)

        try:
            patterns = record.patterns_for(attribute)
        except MalformedRecord as exc:
            logger.error(
                "Whitelist record is malformed — treating as empty whitelist",
                whitelist=whitelist_id,
                data_bag=data_bag,
                error=str(exc),
            )
            record = WhitelistRecord.empty(whitelist_id, data_bag)
            patterns = ()

        matched = matcher.match_pattern(fqdn, patterns)
        if matched is not None:
            logger.info(
                "Whitelisting: matched pattern to host",
                pattern=matched,
                fqdn=fqdn,
                whitelist=whitelist_id,
            )
            return True

        if record.has_roles:
            if self.search_roles(record.roles):
                logger.info(
                    "Whitelisting: found host via role search",
                    fqdn=fqdn,
                    whitelist=whitelist_id,
                )
                return True
            logger.info(
                "Whitelisting: host wasn't found via role search",
                fqdn=fqdn,
                whitelist=whitelist_id,
            )

        logger.info(
            "Whitelisting: host didn't match any patterns",
            fqdn=fqdn,
            whitelist=whitelist_id,
        )
        return False

    def search_roles(self, roles: Union[str, Sequence[str]]) -> bool:
        """Return True if the subject holds any of `roles` (first match wins)."""
        return matcher.search_roles(self._subject, roles)

    def load_record(self, whitelist_id: str, data_bag: str = DEFAULT_DATA_BAG) -> WhitelistRecord:
        """Return the whitelist record, fetching it at most once per run.

        Never raises for store or record errors — see module docstring.
        """
        return self._cache.get_or_load(
            data_bag,
            whitelist_id,
            lambda: self._fetch_record(whitelist_id, data_bag),
        )

    # ── Internals ─────────────────────────────────────────────────────────────

    def _fetch_record(self, whitelist_id: str, data_bag: str) -> tuple[WhitelistRecord, bool]:
        try:
            item = self._store.fetch_item(data_bag, whitelist_id)
            record = WhitelistRecord.from_item(whitelist_id, data_bag, item)
        except (FetchFailure, MalformedRecord) as exc:
            logger.error(
                "Problem loading whitelist — defaulting to empty whitelist configuration",
                whitelist=whitelist_id,
                data_bag=data_bag,
                error=str(exc),
                error_type=type(exc).__name__,
                cached=self._cache_failures,
            )
            return WhitelistRecord.empty(whitelist_id, data_bag), self._cache_failures

        logger.debug(
            "Whitelist record loaded",
            whitelist=whitelist_id,
            data_bag=data_bag,
            has_roles=record.has_roles,
        )
        return record, True
