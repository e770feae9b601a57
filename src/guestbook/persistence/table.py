"""
Guest Book Persistence Layer - Guest Table

The shared in-memory table of guest entries. It is created lazily on first
use and lives as long as the object that owns it.
"""

import itertools
import logging
import threading
from typing import Dict, List, Optional

from ..core.guest import GuestEntry
from .base import GuestStore

logger = logging.getLogger(__name__)


class GuestTable(GuestStore):
    """Ordered id -> GuestEntry table guarded by a re-entrant lock."""

    def __init__(self, id_seed: int = 1):
        self._rows: Optional[Dict[int, GuestEntry]] = None
        self._ids = itertools.count(max(1, id_seed))
        self._lock = threading.RLock()

    @property
    def exists(self) -> bool:
        return self._rows is not None

    def ensure_exists(self) -> None:
        with self._lock:
            if self._rows is None:
                self._rows = {}
                logger.debug("Guest table created")

    def insert(self, entry: GuestEntry) -> None:
        with self._lock:
            self.ensure_exists()
            self._rows[entry.id] = entry

    def list_recent(self, limit: int) -> List[GuestEntry]:
        with self._lock:
            self.ensure_exists()
            rows = sorted(self._rows.values(), key=lambda e: e.id, reverse=True)
        return rows[:max(0, limit)]

    def clear(self) -> None:
        with self._lock:
            if self._rows is None:
                return
            self._rows.clear()

    def next_id(self) -> int:
        with self._lock:
            return next(self._ids)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows) if self._rows is not None else 0
