"""Pattern and role matching for whitelist resolution.

match_pattern() and search_roles() are the two checks the resolver composes.
Both are first-match-wins: the returned pattern / role is the first one in
the record's order, which is what gets logged. The boolean outcome is an OR
and does not depend on order.

Glob semantics are fnmatch.fnmatchcase: `*` any run of characters, `?` one
character, `[...]` a character set. Case-sensitive, and `/` is not special.
"""

from __future__ import annotations

from collections.abc import Sequence
from fnmatch import fnmatchcase
from typing import Optional, Union

from hostwhitelist.models.subject import Subject
from hostwhitelist.utils.logger import get_logger

logger = get_logger(__name__)


def match_pattern(fqdn: Optional[str], patterns: Sequence[str]) -> Optional[str]:
    """Return the first pattern in `patterns` that glob-matches `fqdn`, else None.

    A missing fqdn is matched as the empty string.
    """
    host = fqdn or ""
    for pattern in patterns:
        if fnmatchcase(host, pattern):
            return pattern
    return None


def find_role(subject: Subject, roles: Union[str, Sequence[str]]) -> Optional[str]:
    """Return the first role in `roles` the subject holds, else None.

    A single role name is accepted in place of a list.
    """
    if isinstance(roles, str):
        roles = (roles,)

    for role in roles:
        logger.info("Searching for host in role", fqdn=subject.fqdn, role=role)
        if subject.has_role(role):
            logger.info("Whitelisting: found host via role", fqdn=subject.fqdn, role=role)
            return role
    return None


def search_roles(subject: Subject, roles: Union[str, Sequence[str]]) -> bool:
    """True if the subject holds any of `roles`. An empty list is False."""
    return find_role(subject, roles) is not None
