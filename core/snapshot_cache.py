"""
Snapshot cache with file-based storage.

One JSON file per (league, dataset family, dataset type) under the cache
directory:

    <cache_dir>/<league>/<family>/<type>.json

Writes go to a temporary file in the same directory and are moved into
place with ``os.replace``, so a reader sees either the old slot or the new
one, never a half-written file.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

from core.constants import CACHE_FILE_SUFFIX
from core.models import DatasetKey, RecordParseError, Snapshot

logger = logging.getLogger(__name__)


class SnapshotCache:
    """
    Reads and writes persisted snapshots. No freshness policy lives here.
    """

    def __init__(self, cache_dir: Path):
        """
        Args:
            cache_dir: Base directory for cache slots. Created on first write.
        """
        self.cache_dir = Path(cache_dir)
        # One writer per slot at a time within this process
        self._locks: Dict[Path, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def path_for(self, key: DatasetKey) -> Path:
        """Location of the cache slot for ``key``."""
        return (
            self.cache_dir
            / key.league.value
            / key.family.value
            / f"{key.dataset_type.value}{CACHE_FILE_SUFFIX}"
        )

    def _lock_for(self, path: Path) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(path)
            if lock is None:
                lock = threading.Lock()
                self._locks[path] = lock
            return lock

    def read(self, key: DatasetKey) -> Optional[Snapshot]:
        """
        Load the snapshot stored for ``key``.

        Returns:
            The stored Snapshot, or None if the slot is missing or corrupt
        """
        path = self.path_for(key)
        if not path.exists():
            logger.debug(f"No cache slot for {key}")
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            snapshot = Snapshot.from_dict(data, key.family)
        except (OSError, ValueError, RecordParseError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning(f"Ignoring corrupt cache slot {path}: {e}")
            return None

        if snapshot.fetched_at is None:
            logger.warning(f"Ignoring cache slot without timestamp: {path}")
            return None

        logger.debug(f"Loaded {len(snapshot)} records from {path}")
        return snapshot

    def write(self, key: DatasetKey, snapshot: Snapshot) -> Path:
        """
        Replace the slot for ``key`` with ``snapshot``.

        Raises:
            ValueError: if ``snapshot`` is the empty sentinel
            OSError: if the slot cannot be written
        """
        if snapshot.fetched_at is None:
            raise ValueError("Refusing to cache a snapshot without data")

        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False)

        with self._lock_for(path):
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
                raise

        logger.debug(f"Cached {len(snapshot)} records for {key}")
        return path

    def clear(self, key: DatasetKey) -> bool:
        """
        Remove the slot for ``key``.

        Returns:
            True if a slot was removed
        """
        path = self.path_for(key)
        with self._lock_for(path):
            if not path.exists():
                return False
            path.unlink()
        logger.debug(f"Cleared cache slot for {key}")
        return True
