"""ULID generation utility for hostwhitelist.

Provides a single `generate_ulid()` function that returns a 26-character ULID
used as the run_id of a run scope:
  - Bound into every structured log entry emitted during the run
  - Exposed on ResolutionCache.run_id for callers that correlate runs

Uses the `python-ulid` library (see pyproject.toml) — do NOT hand-roll ULID generation.
"""

from __future__ import annotations

from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID as a 26-character uppercase string.

    Returns:
        str: A 26-character ULID string, Crockford Base32 (``[0-9A-HJKMNP-TV-Z]``).

    Example::

        run_id = generate_ulid()
        assert len(run_id) == 26
    """
    return str(ULID())
