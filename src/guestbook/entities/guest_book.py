"""
Guest Book Entity

The standalone guest book view: recent entries, the sign form and a
visitor counter that ticks while the page holds a live connection.
"""

import logging
import random
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from fasthtml.common import Div, H2, P, Span
from pydantic import Field, PrivateAttr

from ..core import Entity, GuestEntry, event, is_valid
from ..core.entity import EntityConfig
from ..persistence import GuestStore

if TYPE_CHECKING:
    from ..app.context import AppContext

logger = logging.getLogger(__name__)

ENTRIES_ID = "guest-entries"


def guest_card(entry: GuestEntry):
    return Div(
        Div(
            Div(
                P(entry.name, cls="font-semibold text-white"),
                P(entry.message, cls="text-purple-200 mt-1"),
            ),
            Span(entry.timestamp.strftime("%H:%M:%S"), cls="text-purple-400 text-xs"),
            cls="flex justify-between items-start",
        ),
        cls="bg-white/10 backdrop-blur rounded-xl p-4 border border-white/10 hover:bg-white/15 transition-colors",
    )


def guest_entries(entries: List[GuestEntry]):
    """The "Recent Guests" section, replaced as a whole on every change."""
    if entries:
        body = Div(*[guest_card(e) for e in entries], cls="space-y-3")
    else:
        body = Div(P("No guests yet. Be the first to sign!", cls="text-purple-300"),
                   cls="bg-white/5 rounded-xl p-8 text-center border border-white/10")
    return Div(
        H2("Recent Guests ",
           Span(f"({len(entries)} entries)", cls="text-purple-300 text-sm font-normal ml-2"),
           cls="text-xl font-semibold text-white"),
        body,
        id=ENTRIES_ID,
        cls="space-y-4",
    )


class GuestBook(Entity):
    """Guest book page state. One instance per open page."""
    model_config = EntityConfig(live=True, client_fields=("name", "message"))

    name: str = ""
    message: str = ""
    visitor_count: int = 0
    entries: List[GuestEntry] = Field(default_factory=list, exclude=True)
    connected: bool = Field(default=False, exclude=True)

    _store: Optional[GuestStore] = PrivateAttr(default=None)
    _rng: random.Random = PrivateAttr(default_factory=random.Random)
    _cap: int = PrivateAttr(default=20)

    @classmethod
    def mount(cls, store: GuestStore, rng: Optional[random.Random] = None, *,
              id: Optional[str] = None, cap: int = 20) -> 'GuestBook':
        """Load the newest entries, start with an empty form and a random visitor count."""
        rng = rng or random.Random()
        fields = {"id": id} if id else {}
        view = cls(visitor_count=500 + rng.randrange(1000), **fields)
        view._store = store
        view._rng = rng
        view._cap = cap
        view.entries = store.list_recent(cap)
        return view

    @classmethod
    def from_context(cls, context: 'AppContext', **assigns) -> 'GuestBook':
        return cls.mount(context.store, context.rng,
                         id=assigns.get("id"),
                         cap=context.config.guestbook.standalone_cap)

    def connect(self) -> None:
        self.connected = True
        self.entries = self._store.list_recent(self._cap)

    def disconnect(self) -> None:
        self.connected = False

    def tick(self) -> None:
        """Bump the visitor counter. Only meaningful while connected."""
        if not self.connected:
            return
        self.visitor_count += self._rng.randint(1, 3)

    @event(method="POST")
    def submit(self, name: str = "", message: str = ""):
        candidate = GuestEntry.candidate(self._store.next_id(), name, message)
        if is_valid(candidate):
            self._store.insert(candidate)
            self.entries = self._store.list_recent(self._cap)
        else:
            logger.debug(f"Rejected empty guest entry on view {self.id}")
        self.name = ""
        self.message = ""
        return self.entry_list()

    @event(method="POST")
    def clear(self):
        self._store.clear()
        self.entries = []
        return self.entry_list()

    def entry_list(self):
        return guest_entries(self.entries)

    def fragments(self):
        return (self.entry_list(),)

    def state(self) -> Dict[str, Any]:
        return {
            **self.signal_values(),
            "connected": self.connected,
            "entries": [e.model_dump(mode="json") for e in self.entries],
        }
