"""WhitelistRecord dataclass — typed view of one whitelist data bag item.

A whitelist item is a JSON/YAML document stored in a data bag:

    {
      "id": "my_whitelist",
      "patterns": ["host.example.com", "*.subdomain.example.com"],
      "roles": ["Webserver", "DatabaseServer"]
    }

`patterns` is optional (missing means no patterns). `roles` is optional and
its presence matters: a missing key skips the role search entirely, an empty
list runs it and finds nothing.

IMPORTANT: records are frozen. The resolution cache only ever swaps whole
records in or out; nothing mutates a record after from_item() builds it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Optional

from hostwhitelist.constants import DEFAULT_PATTERN_ATTRIBUTE, ROLES_KEY


class WhitelistError(Exception):
    """Base class for every error raised by hostwhitelist."""


class MalformedRecord(WhitelistError):
    """A data bag item whose shape cannot be read as a whitelist.

    Raised when the item is not a mapping, or when `roles` (or the chosen
    pattern attribute) is present but is not a string or a sequence of strings.
    """

    def __init__(self, whitelist_id: str, key: Optional[str], reason: str) -> None:
        self.whitelist_id = whitelist_id
        self.key = key
        self.reason = reason
        where = f"key '{key}' of " if key else ""
        super().__init__(f"Malformed whitelist record: {where}'{whitelist_id}': {reason}")


# ─── WhitelistRecord ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class WhitelistRecord:
    """Immutable whitelist record as fetched from a data bag store.

    Fields:
        whitelist_id: Data bag item id the record was fetched as.
        data_bag:     Data bag the item lives in.
        fields:       Read-only view of the raw item.
        roles:        Role names, or None when the item has no `roles` key.
        placeholder:  True only for the stand-in built by empty(); a fetched
                      item with no fields is still a real record.
    """

    whitelist_id: str
    data_bag: str
    fields: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    roles: Optional[tuple[str, ...]] = None
    placeholder: bool = False

    @classmethod
    def from_item(cls, whitelist_id: str, data_bag: str, item: object) -> "WhitelistRecord":
        """Build a record from a raw data bag item.

        Raises:
            MalformedRecord: item is not a mapping, or `roles` is not a string
                             or a sequence of strings.
        """
        if not isinstance(item, Mapping):
            raise MalformedRecord(
                whitelist_id, None, f"expected a mapping, got {type(item).__name__}"
            )

        roles: Optional[tuple[str, ...]] = None
        if item.get(ROLES_KEY) is not None:
            roles = _as_str_tuple(whitelist_id, ROLES_KEY, item[ROLES_KEY])

        return cls(
            whitelist_id=whitelist_id,
            data_bag=data_bag,
            fields=MappingProxyType(dict(item)),
            roles=roles,
        )

    @classmethod
    def empty(cls, whitelist_id: str, data_bag: str) -> "WhitelistRecord":
        """Return the record used in place of one that could not be loaded.

        No patterns and no `roles` key — never matches any host.
        """
        return cls(whitelist_id=whitelist_id, data_bag=data_bag, placeholder=True)

    @property
    def is_empty(self) -> bool:
        """True for the stand-in returned by empty(), not for a fetched `{}`."""
        return self.placeholder

    @property
    def has_roles(self) -> bool:
        return self.roles is not None

    def patterns_for(self, attribute: str = DEFAULT_PATTERN_ATTRIBUTE) -> tuple[str, ...]:
        """Return the glob patterns stored under `attribute` (empty if missing).

        Raises:
            MalformedRecord: the value is not a string or a sequence of strings.
        """
        raw = self.fields.get(attribute)
        if raw is None:
            return ()
        return _as_str_tuple(self.whitelist_id, attribute, raw)


def _as_str_tuple(whitelist_id: str, key: str, raw: object) -> tuple[str, ...]:
    """Normalize a string or a sequence of strings into a tuple of strings."""
    if isinstance(raw, str):
        return (raw,)
    if not isinstance(raw, Sequence) or isinstance(raw, (bytes, bytearray)):
        raise MalformedRecord(
            whitelist_id, key, f"expected a list of strings, got {type(raw).__name__}"
        )
    for i, value in enumerate(raw):
        if not isinstance(value, str):
            raise MalformedRecord(
                whitelist_id,
                key,
                f"entry {i} is {type(value).__name__}, expected a string",
            )
    return tuple(raw)
