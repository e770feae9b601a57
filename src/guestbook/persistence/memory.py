"""
Guest Book Persistence Layer - Memory View Registry

In-memory registry of mounted views. Data is lost when the application restarts.
"""

import threading
import time
from typing import Dict, Optional, TYPE_CHECKING

from .base import EntityBackend

if TYPE_CHECKING:
    from ..core.entity import Entity


class MemoryRepo(EntityBackend):
    """
    In-memory view registry with optional per-entry TTL.

    One instance is created per application and handed around explicitly.
    """

    def __init__(self, cleanup_interval: int = 60, clock=time.monotonic):
        super().__init__(cleanup_interval)
        self._data: Dict[str, 'Entity'] = {}
        self._expiry: Dict[str, float] = {}
        self._clock = clock
        self._lock = threading.RLock()

    def _expired(self, key: str) -> bool:
        return key in self._expiry and self._clock() > self._expiry[key]

    def _evict(self, key: str) -> None:
        self._data.pop(key, None)
        self._expiry.pop(key, None)

    def save_entity_sync(self, entity: 'Entity', ttl: Optional[int] = None) -> bool:
        """Save a view with optional TTL."""
        with self._lock:
            key = entity.id
            self._data[key] = entity
            if ttl:
                self._expiry[key] = self._clock() + ttl
            elif key in self._expiry:
                del self._expiry[key]
        return True

    def load_entity_sync(self, key: str) -> Optional['Entity']:
        with self._lock:
            if self._expired(key):
                self._evict(key)
                return None
            return self._data.get(key)

    def delete_entity_sync(self, key: str) -> bool:
        with self._lock:
            existed = key in self._data
            self._evict(key)
            return existed

    def exists_sync(self, key: str) -> bool:
        with self._lock:
            if self._expired(key):
                self._evict(key)
                return False
            return key in self._data

    def cleanup_expired_sync(self) -> int:
        """Drop every expired view and return how many were dropped."""
        with self._lock:
            now = self._clock()
            expired_keys = [key for key, expiry_time in self._expiry.items() if now > expiry_time]
            for key in expired_keys:
                self._evict(key)
            return len(expired_keys)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
