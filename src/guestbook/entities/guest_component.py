"""
Embeddable Guest Book Component

A compact guest book a host application can embed. The host supplies an
``id`` and optionally ``host_app`` and ``theme``; every host update re-reads
the shared table so the embedded view stays fresh without events.
"""

import json
import logging
import re
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from fasthtml.common import Button, Div, Form, H2, Input, P, Span
from monsterui.all import UkIcon
from pydantic import Field, PrivateAttr

from ..core import Entity, GuestEntry, event, is_valid
from ..core.entity import EntityConfig
from ..persistence import GuestStore

if TYPE_CHECKING:
    from ..app.context import AppContext

logger = logging.getLogger(__name__)

THEME_STYLES = {
    "light": {
        "container": "bg-white text-gray-900 rounded-xl border border-gray-200",
        "input": "px-3 py-2 rounded-lg border border-gray-300 bg-white text-gray-900 placeholder-gray-400 focus:outline-none focus:ring-2 focus:ring-purple-500",
        "button": "px-4 py-2 bg-purple-600 hover:bg-purple-700 text-white font-medium rounded-lg transition-colors",
        "entry": "p-3 rounded-lg bg-gray-50 border border-gray-100",
    },
    "dark": {
        "container": "bg-gray-800 text-gray-100 rounded-xl border border-gray-700",
        "input": "px-3 py-2 rounded-lg border border-gray-600 bg-gray-700 text-white placeholder-gray-400 focus:outline-none focus:ring-2 focus:ring-purple-500",
        "button": "px-4 py-2 bg-purple-600 hover:bg-purple-500 text-white font-medium rounded-lg transition-colors",
        "entry": "p-3 rounded-lg bg-gray-700/50 border border-gray-600/50",
    },
}


def theme_variant(theme: Optional[str]) -> str:
    """Map a host theme to a palette: "light" stays light, everything else is dark."""
    return "light" if theme == "light" else "dark"


def theme_styles(theme: Optional[str]) -> Dict[str, str]:
    return THEME_STYLES[theme_variant(theme)]


def _signal_key(value: str) -> str:
    return re.sub(r"\W", "_", value)


class GuestComponent(Entity):
    """Embedded guest book. Signals are namespaced per instance."""
    model_config = EntityConfig(client_fields=("name", "message"))

    host_app: str = "unknown"
    theme: str = "dark"
    name: str = ""
    message: str = ""
    entries: List[GuestEntry] = Field(default_factory=list, exclude=True)

    _store: Optional[GuestStore] = PrivateAttr(default=None)
    _cap: int = PrivateAttr(default=15)

    @property
    def namespace(self) -> str:
        return f"{self.class_namespace()}.{_signal_key(self.id)}"

    @property
    def styles(self) -> Dict[str, str]:
        return theme_styles(self.theme)

    @classmethod
    def mount(cls, store: GuestStore, *, id: str, host_app: Optional[str] = None,
              theme: Optional[str] = None, cap: int = 15) -> 'GuestComponent':
        view = cls(id=str(id))
        view._store = store
        view._cap = cap
        return view.update(host_app=host_app, theme=theme)

    @classmethod
    def from_context(cls, context: 'AppContext', **assigns) -> 'GuestComponent':
        return cls.mount(context.store,
                         id=assigns["id"],
                         host_app=assigns.get("host_app", assigns.get("hostApp")),
                         theme=assigns.get("theme"),
                         cap=context.config.guestbook.component_cap)

    @classmethod
    def embed(cls, context: 'AppContext', id: str, **assigns) -> 'GuestComponent':
        """
        Host-side entry point: reuse the instance registered under ``id`` or mount one.

        The instance is registered with the application so its events can be routed.
        """
        view = context.views.load_entity_sync(id)
        if isinstance(view, cls):
            view.update(assigns)
        else:
            view = cls.from_context(context, id=id, **assigns)
            logger.info(f"Mounted guest component {id} for host {view.host_app}")
        return context.track(view)

    @classmethod
    def unmount(cls, context: 'AppContext', id: str) -> bool:
        """Discard an embedded instance."""
        return context.views.delete_entity_sync(id)

    def update(self, host_config: Optional[Mapping[str, Any]] = None, **assigns) -> 'GuestComponent':
        """Merge host configuration and re-read the newest entries."""
        config = {**(host_config or {}), **assigns}
        host_app = config.get("host_app")
        if host_app is None:
            host_app = config.get("hostApp")
        if host_app is not None:
            self.host_app = str(host_app)
        if config.get("theme") is not None:
            self.theme = str(config["theme"])
        self.entries = self._store.list_recent(self._cap)
        return self

    @event(method="POST")
    def submit(self, name: str = "", message: str = ""):
        candidate = GuestEntry.candidate(self._store.next_id(), name, message, origin_host=self.host_app)
        if is_valid(candidate):
            self._store.insert(candidate)
        else:
            logger.debug(f"Rejected empty guest entry from host {self.host_app}")
        self.entries = self._store.list_recent(self._cap)
        self.name = ""
        self.message = ""
        return self.entry_list()

    @event(method="POST")
    def clear(self):
        self._store.clear()
        self.entries = []
        return self.entry_list()

    @event(method="POST")
    def refresh(self):
        self.entries = self._store.list_recent(self._cap)
        return self.entry_list()

    def entry_list(self):
        styles = self.styles
        if self.entries:
            rows = [
                Div(
                    Div(
                        Div(
                            Span(e.name, cls="font-medium"),
                            Span("—", cls="opacity-50 mx-2"),
                            Span(e.message, cls="opacity-80"),
                        ),
                        Span(e.timestamp.strftime("%H:%M"), cls="text-xs opacity-40 whitespace-nowrap ml-4"),
                        cls="flex justify-between items-start",
                    ),
                    cls=styles["entry"],
                )
                for e in self.entries
            ]
        else:
            rows = [P("No guests yet. Be the first!", cls="text-center py-4 opacity-50")]

        return Div(
            Div(*rows, cls="space-y-2 max-h-64 overflow-y-auto"),
            Div(
                Span(f"{len(self.entries)} entries"),
                Button("Clear all", data_on_click=self.action("clear"), cls="hover:opacity-100 transition-opacity"),
                cls="mt-4 pt-4 border-t border-current/10 flex justify-between items-center text-xs opacity-50",
            ),
            id=f"{self.dom_id}-entries",
        )

    def fragments(self):
        return (self.entry_list(),)

    def state(self) -> Dict[str, Any]:
        return {
            **self.signal_values(),
            "theme_variant": theme_variant(self.theme),
            "entries": [e.model_dump(mode="json") for e in self.entries],
        }

    def __ft__(self):
        styles = self.styles
        return Div(
            {"data-signals": json.dumps(self.signals)},
            Div(
                Div(
                    Div(
                        H2("Guest Book", cls="text-2xl font-bold"),
                        P("Embedded component from ", Span("guestbook", cls="font-mono"), cls="text-sm opacity-70 mt-1"),
                    ),
                    Div(
                        Span(f"Hosted by: {self.host_app}", cls="text-xs opacity-50"),
                        Button(
                            UkIcon("refresh-cw", cls="w-4 h-4"),
                            data_on_click=self.action("refresh"),
                            cls="p-2 rounded-lg hover:bg-white/10 transition-colors",
                            title="Refresh",
                        ),
                        cls="flex items-center gap-2",
                    ),
                    cls="flex justify-between items-center mb-6",
                ),
                Form(
                    Div(
                        Input(type="text", name="name", placeholder="Your name", required=True,
                              data_bind=self.Sname, cls=styles["input"]),
                        Input(type="text", name="message", placeholder="Leave a message...", required=True,
                              data_bind=self.Smessage, cls=styles["input"] + " flex-1"),
                        Button("Sign", type="submit", cls=styles["button"]),
                        cls="flex gap-3",
                    ),
                    data_on_submit=self.action("submit"),
                    cls="mb-6",
                ),
                self.entry_list(),
                cls="p-6",
            ),
            id=self.dom_id,
            cls=styles["container"],
        )
