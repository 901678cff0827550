"""Subject protocol + NodeSubject — the host being tested against a whitelist.

The resolver needs exactly two capabilities from a host:

    subject.fqdn            -> str | None   (None / "" are matched as "")
    subject.has_role(name)  -> bool

Any object providing them satisfies Subject. NodeSubject is the concrete
implementation built from a node's JSON attributes (the document a
configuration-management client writes for each host).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable

# Prefix/suffix of a role entry in a node run list: "role[Webserver]"
_RUN_LIST_ROLE_PREFIX = "role["
_RUN_LIST_ROLE_SUFFIX = "]"


# ─── Subject Protocol ────────────────────────────────────────────────────────


@runtime_checkable
class Subject(Protocol):
    """Host identity and role membership, supplied by the host system."""

    @property
    def fqdn(self) -> Optional[str]:
        """Fully-qualified domain name of the host. May be None or empty."""
        ...

    def has_role(self, name: str) -> bool:
        """True if the host holds the named role."""
        ...


# ─── NodeSubject ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class NodeSubject:
    """Subject backed by static node data.

    Usage:
        subject = NodeSubject(fqdn="web01.example.com", roles=frozenset({"Webserver"}))
        subject = NodeSubject.from_node_data(json.load(fh))
    """

    fqdn: Optional[str] = None
    roles: frozenset[str] = frozenset()

    def has_role(self, name: str) -> bool:
        return name in self.roles

    @classmethod
    def from_node_data(cls, data: Mapping[str, Any]) -> "NodeSubject":
        """Build a subject from a node JSON document.

        fqdn is read from the top level, then from `automatic.fqdn`.
        Roles are the union of the top-level / `automatic` expanded `roles`
        list and every `role[...]` entry of `run_list`.
        """
        automatic = data.get("automatic") or {}

        fqdn = data.get("fqdn") or automatic.get("fqdn")

        roles: set[str] = set()
        roles.update(_strings(data.get("roles")))
        roles.update(_strings(automatic.get("roles")))
        for entry in _strings(data.get("run_list")):
            if entry.startswith(_RUN_LIST_ROLE_PREFIX) and entry.endswith(_RUN_LIST_ROLE_SUFFIX):
                roles.add(entry[len(_RUN_LIST_ROLE_PREFIX):-len(_RUN_LIST_ROLE_SUFFIX)])

        return cls(fqdn=fqdn, roles=frozenset(roles))


def _strings(raw: object) -> Iterable[str]:
    """Yield the string members of a list attribute, ignoring anything else."""
    if isinstance(raw, str):
        return (raw,)
    if not isinstance(raw, (list, tuple)):
        return ()
    return (value for value in raw if isinstance(value, str))
