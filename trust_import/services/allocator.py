from __future__ import annotations

import logging

from ..db.store import ImportStore, StoreError

"""Member identifier allocation.

Identifiers are a one-letter prefix chosen by membership type followed by a
5-digit zero-padded sequence number (P00001, R00042, H00007).

Allocation reads the greatest existing identifier for the prefix and adds
one. Within one batch rows are processed sequentially, so consecutive
allocations always see the previous insert. Two batches running at the same
time can still read the same last identifier; the second insert then fails
on the members primary key and is reported as that row's store error.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "MEMBER_ID_PREFIXES",
    "DEFAULT_PREFIX",
    "SEQUENCE_WIDTH",
    "member_id_prefix",
    "next_member_id",
    "allocate_member_id",
]

MEMBER_ID_PREFIXES = {"premium": "P", "regular": "R"}
DEFAULT_PREFIX = "H"
SEQUENCE_WIDTH = 5


def member_id_prefix(membership_type: str | None) -> str:
    return MEMBER_ID_PREFIXES.get(membership_type or "", DEFAULT_PREFIX)


def next_member_id(prefix: str, last_id: str | None) -> str:
    """Return the identifier following last_id for prefix.

    A missing or unparsable last_id restarts the sequence at 1.

    >>> next_member_id("P", None)
    'P00001'
    >>> next_member_id("R", "R00041")
    'R00042'
    """
    if not last_id:
        return f"{prefix}{1:0{SEQUENCE_WIDTH}d}"
    try:
        last_number = int(last_id[1:])
    except ValueError:
        logger.warning("unparsable member id %r for prefix %s; restarting sequence", last_id, prefix)
        return f"{prefix}{1:0{SEQUENCE_WIDTH}d}"
    return f"{prefix}{last_number + 1:0{SEQUENCE_WIDTH}d}"


def allocate_member_id(store: ImportStore, membership_type: str | None) -> str:
    prefix = member_id_prefix(membership_type)
    try:
        last_id = store.last_member_id_with_prefix(prefix)
    except StoreError as e:
        # Lookup failure falls back to the first slot; a clash surfaces on insert
        logger.warning("member id lookup failed for prefix %s: %s", prefix, e)
        last_id = None
    return next_member_id(prefix, last_id)
