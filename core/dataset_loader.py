"""
Dataset loader: serves a snapshot from cache, refreshes it from poe.ninja,
or falls back to whatever is available.

Order of preference for a key:

    fresh cache -> fresh network -> stale cache -> empty snapshot

``load`` never raises on fetch failures; callers tell "current", "stale"
and "nothing" apart by looking at ``Snapshot.fetched_at``.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Protocol

from core.catalog import DatasetType, League
from core.constants import CACHE_THRESHOLD_MINUTES
from core.freshness import is_fresh
from core.models import DatasetKey, Snapshot
from core.snapshot_cache import SnapshotCache
from data_sources.base_api import FetchError

logger = logging.getLogger(__name__)


class SnapshotFetcher(Protocol):
    def fetch(self, league: League, dataset_type: DatasetType) -> Snapshot:
        ...


def _local_now() -> datetime:
    return datetime.now().astimezone()


class DatasetLoader:
    """Composes the cache, the freshness policy and the fetcher."""

    def __init__(
        self,
        cache: SnapshotCache,
        fetcher: SnapshotFetcher,
        threshold_minutes: float = CACHE_THRESHOLD_MINUTES,
        clock: Callable[[], datetime] = _local_now,
    ):
        """
        Args:
            cache: Snapshot cache store
            fetcher: Remote fetcher (anything with ``fetch(league, type)``)
            threshold_minutes: Default freshness threshold
            clock: Source of "now" for freshness checks
        """
        self.cache = cache
        self.fetcher = fetcher
        self.threshold_minutes = threshold_minutes
        self.clock = clock

    def load(
        self,
        league: League,
        dataset_type: DatasetType,
        threshold_minutes: Optional[float] = None,
    ) -> Snapshot:
        """
        Get the best available snapshot for (league, dataset_type).

        Args:
            league: League to load
            dataset_type: Currency or item type
            threshold_minutes: Freshness threshold, defaults to the loader's

        Returns:
            A fresh or refreshed snapshot, a stale cached one if the refresh
            failed, or the empty sentinel if nothing is available
        """
        key = DatasetKey(league=league, dataset_type=dataset_type)
        threshold = self.threshold_minutes if threshold_minutes is None else threshold_minutes

        cached = self.cache.read(key)
        if cached is not None:
            logger.debug(f"Cached:\t{cached.fetched_at}")
            if is_fresh(cached, self.clock(), threshold):
                return cached
            logger.info("Cache is out of date...")

        logger.info(f"Pulling {dataset_type.value} for {league.value} from poe.ninja...")
        try:
            snapshot = self.fetcher.fetch(league, dataset_type)
        except FetchError as e:
            logger.warning(f"Could not refresh {key} from poe.ninja: {e}")
            if cached is not None:
                logger.warning(f"Using cache from {cached.fetched_at}")
                return cached
            return Snapshot.empty()

        try:
            self.cache.write(key, snapshot)
        except OSError as e:
            logger.error(f"Failed to cache {key}: {e}")

        return snapshot
