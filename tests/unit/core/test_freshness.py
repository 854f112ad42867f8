"""Tests for core.freshness."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from core.freshness import is_fresh, snapshot_age
from core.models import Snapshot

pytestmark = pytest.mark.unit

NOW = datetime(2024, 4, 1, 12, 0, tzinfo=timezone.utc)


def snapshot_at(age: timedelta, tz: timezone = timezone.utc) -> Snapshot:
    return Snapshot(records=(), fetched_at=(NOW - age).astimezone(tz))


@pytest.mark.parametrize("threshold", [1, 15, 60, 1440])
@pytest.mark.parametrize("age_minutes", [0, 0.5, 14, 14.99, 15, 15.01, 20, 120])
def test_fresh_iff_age_below_threshold(threshold, age_minutes):
    snapshot = snapshot_at(timedelta(minutes=age_minutes))
    assert is_fresh(snapshot, NOW, threshold) == (age_minutes < threshold)


@pytest.mark.parametrize("threshold", [0, 1, 15, 10_000])
def test_empty_sentinel_never_fresh(threshold):
    assert is_fresh(Snapshot.empty(), NOW, threshold) is False


def test_default_threshold_is_15_minutes():
    assert is_fresh(snapshot_at(timedelta(minutes=14, seconds=59)), NOW) is True
    assert is_fresh(snapshot_at(timedelta(minutes=15)), NOW) is False


def test_compares_absolute_instants_across_offsets():
    # Stamped 10 minutes ago in UTC+9, checked from UTC-7
    snapshot = snapshot_at(timedelta(minutes=10), tz=timezone(timedelta(hours=9)))
    now = NOW.astimezone(timezone(timedelta(hours=-7)))
    assert is_fresh(snapshot, now, 15) is True
    assert is_fresh(snapshot, now, 5) is False


def test_naive_timestamps_are_local_time():
    naive_now = datetime.now()
    snapshot = Snapshot(records=(), fetched_at=naive_now - timedelta(minutes=3))
    assert is_fresh(snapshot, naive_now.astimezone(), 15) is True


def test_snapshot_age():
    assert snapshot_age(Snapshot.empty(), NOW) is None
    assert snapshot_age(snapshot_at(timedelta(minutes=20)), NOW) == timedelta(minutes=20)
