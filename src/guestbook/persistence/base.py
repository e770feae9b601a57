"""
Guest Book Persistence Layer - Base Classes

Abstract interfaces for the guest entry store and for the registry
that keeps mounted views between page render and live connection.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.entity import Entity
    from ..core.guest import GuestEntry

logger = logging.getLogger(__name__)


class GuestStore(ABC):
    """
    Ordered store of guest entries keyed by integer id.

    Every single operation is atomic with respect to the others.
    """

    @abstractmethod
    def ensure_exists(self) -> None:
        """Create the underlying table if needed. Idempotent."""

    @abstractmethod
    def insert(self, entry: 'GuestEntry') -> None:
        """Add or overwrite the entry stored under ``entry.id``."""

    @abstractmethod
    def list_recent(self, limit: int) -> List['GuestEntry']:
        """Entries ordered by id descending, truncated to ``limit``."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all entries."""

    @abstractmethod
    def next_id(self) -> int:
        """A positive id never returned before in this process."""

    @abstractmethod
    def __len__(self) -> int:
        pass


class EntityBackend(ABC):
    """
    Abstract base class for view registries.

    Implementations must provide methods for saving, loading, and managing
    view instances with optional TTL support and automatic cleanup.
    """

    def __init__(self, cleanup_interval: int = 60):
        self._cleanup_task: Optional[asyncio.Task] = None
        self._cleanup_interval: int = cleanup_interval
        self._auto_cleanup: bool = True
        self._running: bool = False

    @abstractmethod
    def save_entity_sync(self, entity: 'Entity', ttl: Optional[int] = None) -> bool:
        """
        Save a view instance.

        Args:
            entity: Entity instance to keep
            ttl: Time-to-live in seconds, None keeps it until deleted

        Returns:
            True if save was successful, False otherwise
        """

    @abstractmethod
    def load_entity_sync(self, entity_id: str) -> Optional['Entity']:
        """Load a view instance, None when unknown or expired."""

    @abstractmethod
    def delete_entity_sync(self, entity_id: str) -> bool:
        """Delete a view. True if it existed."""

    @abstractmethod
    def exists_sync(self, entity_id: str) -> bool:
        pass

    @abstractmethod
    def cleanup_expired_sync(self) -> int:
        """
        Clean up expired entries.

        Returns:
            Number of entries cleaned up
        """

    def configure_cleanup(self, enabled: bool = True, interval: int = 60) -> None:
        """
        Configure automatic cleanup behavior.

        Args:
            enabled: Whether to enable automatic cleanup
            interval: Cleanup interval in seconds
        """
        self._auto_cleanup = enabled
        self._cleanup_interval = interval

        if self._running and self._cleanup_task:
            self.stop_cleanup()
            if enabled:
                self.start_cleanup()

    @property
    def cleanup_running(self) -> bool:
        return self._running

    def start_cleanup(self) -> None:
        """Start the background cleanup task if auto_cleanup is enabled."""
        if not self._auto_cleanup or self._cleanup_task:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"{self.__class__.__name__}: no running loop, cleanup not started")
            return
        self._cleanup_task = loop.create_task(self._cleanup_loop())
        self._running = True

    def stop_cleanup(self) -> None:
        """Stop the background cleanup task."""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            self._cleanup_task = None
        self._running = False

    async def _cleanup_loop(self) -> None:
        """Internal cleanup loop that runs periodically."""
        while True:
            try:
                await asyncio.sleep(self._cleanup_interval)
                cleaned = self.cleanup_expired_sync()
                if cleaned > 0:
                    logger.info(f"{self.__class__.__name__}: Cleaned up {cleaned} expired views")
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception(f"{self.__class__.__name__}: Error during cleanup")
