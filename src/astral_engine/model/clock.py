"""Clock injection.

Every time-dependent operation accepts ``now: datetime | None``.  ``None``
means the wall clock; tests pass a fixed value.  The engine works with
naive local date-times throughout.
"""
from __future__ import annotations

from datetime import datetime


def to_naive(moment: datetime) -> datetime:
    """Convert an aware date-time to naive local time; naive values pass through."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def resolve_now(now: datetime | None = None) -> datetime:
    """Return ``now`` as a naive local date-time, defaulting to the wall clock."""
    return to_naive(now) if now is not None else datetime.now()
