"""
Application context: the objects every view and route needs, built once
per application and passed around explicitly.
"""

import random
from dataclasses import dataclass, field
from typing import Optional

from ..config import AppConfig
from ..core.entity import Entity
from ..persistence import GuestStore, GuestTable, MemoryRepo
from .session import SessionRegistry


@dataclass
class AppContext:
    config: AppConfig
    store: GuestStore
    views: MemoryRepo
    sessions: SessionRegistry = field(default_factory=SessionRegistry)
    rng: random.Random = field(default_factory=random.Random)

    @classmethod
    def create(cls, config: Optional[AppConfig] = None, *,
               store: Optional[GuestStore] = None,
               rng: Optional[random.Random] = None) -> 'AppContext':
        config = config or AppConfig.from_environment()
        return cls(config=config,
                   store=store if store is not None else GuestTable(config.guestbook.id_seed),
                   views=MemoryRepo(cleanup_interval=config.guestbook.cleanup_interval),
                   rng=rng or random.Random())

    def track(self, view: Entity, ttl: Optional[int] = None) -> Entity:
        """Register a mounted view so its events and live stream can find it."""
        self.views.save_entity_sync(view, ttl=ttl)
        return view
