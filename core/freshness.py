"""Freshness policy for cached snapshots."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from core.constants import CACHE_THRESHOLD_MINUTES
from core.models import Snapshot


def _aware(value: datetime) -> datetime:
    # Naive timestamps are taken as local time
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.astimezone()
    return value


def snapshot_age(snapshot: Snapshot, now: datetime) -> Optional[timedelta]:
    """Elapsed time since the snapshot was fetched, or None for the empty sentinel."""
    if snapshot.fetched_at is None:
        return None
    return _aware(now) - _aware(snapshot.fetched_at)


def is_fresh(
    snapshot: Snapshot,
    now: datetime,
    threshold_minutes: float = CACHE_THRESHOLD_MINUTES,
) -> bool:
    """
    Decide whether a snapshot can be served without re-fetching.

    Compares absolute instants, so a snapshot stamped in another UTC offset
    ages the same as one stamped locally.

    Args:
        snapshot: Snapshot to check
        now: Current time
        threshold_minutes: Maximum age in minutes (exclusive)

    Returns:
        False for the empty sentinel, else True iff the age is below the threshold
    """
    age = snapshot_age(snapshot, now)
    if age is None:
        return False
    return age < timedelta(minutes=threshold_minutes)
