import json
import urllib.parse
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional
from uuid import uuid4

from fasthtml.common import Div, Script
from pydantic import BaseModel, ConfigDict, Field

from .events import EventInfo
from .signals import EventMethodDescriptor, SignalDescriptor

if TYPE_CHECKING:
    from ..app.context import AppContext

datastar_script = Script(src="https://cdn.jsdelivr.net/gh/starfederation/datastar@v1.0.0-beta.11/bundles/datastar.js", type="module")


class EntityConfig(ConfigDict, total=False):
    """Configuration for all entity classes."""
    namespace: Optional[str]
    use_namespace: bool
    live: bool
    client_fields: tuple


def nest_signals(namespace: Optional[str], values: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap ``values`` under a dotted namespace: ``a.b`` -> ``{"a": {"b": values}}``."""
    if not namespace:
        return values
    for segment in reversed(namespace.split(".")):
        values = {segment: values}
    return values


class Entity(BaseModel):
    """
    Base class for server-side view state.

    Fields are exposed to the browser as namespaced Datastar signals, and
    methods decorated with @event become HTTP routes once the entity class
    is included by a dispatcher.
    """
    model_config = EntityConfig(arbitrary_types_allowed=True,
                                namespace=None,
                                use_namespace=True,
                                live=False,
                                client_fields=())

    id: str = Field(default_factory=lambda: uuid4().hex)

    @classmethod
    def _get_config_value(cls, key: str, default=None):
        """Get configuration value from model_config."""
        return cls.model_config.get(key, default)

    @classmethod
    def route_prefix(cls) -> str:
        return cls.__name__.lower()

    @classmethod
    def class_namespace(cls) -> Optional[str]:
        if not cls._get_config_value("use_namespace", True):
            return None
        return cls._get_config_value("namespace") or cls.__name__

    @classmethod
    def is_live(cls) -> bool:
        """Whether the entity keeps a live SSE connection with a session actor."""
        return bool(cls._get_config_value("live", False))

    @classmethod
    def events(cls) -> Dict[str, EventInfo]:
        """Discover all @event methods, including inherited ones."""
        found = {}
        for klass in reversed(cls.__mro__):
            for name, attr in vars(klass).items():
                if isinstance(attr, EventMethodDescriptor):
                    found[name] = attr._event_info
        return found

    @classmethod
    def from_context(cls, context: 'AppContext', **assigns) -> 'Entity':
        """Mount a fresh instance wired to the application context."""
        raise NotImplementedError(f"{cls.__name__} cannot be mounted from a context")

    @property
    def namespace(self) -> Optional[str]:
        return self.class_namespace()

    @property
    def dom_id(self) -> str:
        return (self.namespace or self.__class__.__name__).replace(".", "-").lower()

    def signal_values(self) -> Dict[str, Any]:
        """Flat signal values of this entity (fields marked ``exclude`` are left out)."""
        return self.model_dump(mode="json")

    @property
    def signals(self) -> Dict[str, Any]:
        return nest_signals(self.namespace, self.signal_values())

    def state(self) -> Dict[str, Any]:
        """Full JSON-ready view state. Subclasses add derived data."""
        return self.signal_values()

    def sync_from_client(self, values: Dict[str, Any]) -> 'Entity':
        """Copy client-writable fields from a (namespaced) Datastar payload subtree."""
        for field_name in self._get_config_value("client_fields", ()):
            value = values.get(field_name)
            if value is not None:
                setattr(self, field_name, str(value))
        return self

    def connect(self) -> None:
        """Called when a live connection for this view opens."""

    def disconnect(self) -> None:
        """Called when the live connection closes."""

    def action(self, event_name: str, **params) -> str:
        """Datastar action expression for an event, bound to this instance."""
        descriptor = getattr(type(self), event_name)
        return descriptor(id=self.id, **params)

    def live_action(self) -> str:
        """Datastar action that opens the live SSE stream for this instance."""
        return f"@get('/{self.route_prefix()}/connect?{urllib.parse.urlencode({'id': self.id})}')"

    def fragments(self) -> Iterable[Any]:
        """HTML fragments that make up the full rendered state."""
        return ()

    def __ft__(self):
        """Render with data-signals attributes."""
        return Div({"data-signals": json.dumps(self.signals)}, id=f"{self.dom_id}-signals")

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)

        # Create signal descriptors for all model fields
        for field_name in cls.model_fields:
            setattr(cls, f"S{field_name}", SignalDescriptor(field_name))

        # Replace @event methods with descriptors that double as action generators
        for attr_name, attr in list(vars(cls).items()):
            if hasattr(attr, '_event_info') and not isinstance(attr, EventMethodDescriptor):
                setattr(cls, attr_name, EventMethodDescriptor(attr_name, cls.route_prefix(), attr))
