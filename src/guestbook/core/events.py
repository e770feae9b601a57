"""
Event Decorator System

The @event decorator only stores metadata on the method.
Route registration is handled by the dispatcher and the FastHTML adapter.
"""

import inspect
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class EventInfo:
    """Metadata about an event method stored by the @event decorator."""
    name: str
    method: str
    selector: Optional[str]
    merge_mode: str
    signature: inspect.Signature
    path: Optional[str] = None

    @property
    def params(self) -> List[inspect.Parameter]:
        """Signature parameters without ``self``."""
        return [p for name, p in self.signature.parameters.items() if name != "self"]


class DatastarPayload:
    """Represents Datastar payload data that can be injected into event methods."""

    def __init__(self, data: Dict[str, Any] = None):
        self._data = data or {}

    @property
    def raw_data(self) -> Dict[str, Any]:
        """Access the raw data dictionary."""
        return self._data

    def dig(self, namespace: str) -> Dict[str, Any]:
        """Walk a dotted namespace; return the subtree or an empty dict."""
        cur: Any = self._data
        for seg in namespace.split("."):
            if not isinstance(cur, dict) or seg not in cur:
                return {}
            cur = cur[seg]
        return cur if isinstance(cur, dict) else {}


def event(
    fn=None,
    *,
    method: str = "POST",
    selector: Optional[str] = None,
    merge_mode: str = "morph",
    path: Optional[str] = None,
):
    """
    Store event metadata only - no route registration.

    Args:
        fn: Function being decorated (when used without parentheses)
        method: HTTP method for the event (GET, POST, etc.)
        selector: CSS selector for Datastar fragment updates
        merge_mode: Datastar merge mode (morph, inner, outer, ...)
        path: Custom path for the route (optional)

    Returns:
        Decorated function with _event_info attribute
    """
    def decorator(func):
        func._event_info = EventInfo(
            name=func.__name__,
            method=method.upper(),
            selector=selector,
            merge_mode=merge_mode,
            signature=inspect.signature(func),
            path=path,
        )
        return func

    # Handle usage as @event without parentheses
    if fn is not None:
        return decorator(fn)

    return decorator


def payload_from_query_params(request) -> DatastarPayload:
    """Extract Datastar payload from the ``datastar`` query parameter."""
    raw = request.query_params.get('datastar')
    if not raw:
        return DatastarPayload()
    try:
        data = json.loads(raw)
    except ValueError:
        return DatastarPayload()
    return DatastarPayload(data if isinstance(data, dict) else None)


async def extract_datastar_payload(request) -> DatastarPayload:
    """Extract Datastar payload from the query string, falling back to a JSON body."""
    payload = payload_from_query_params(request)
    if payload.raw_data or request.method == "GET":
        return payload

    body = await request.body()
    if not body:
        return DatastarPayload()
    try:
        data = json.loads(body)
    except ValueError:
        return DatastarPayload()
    return DatastarPayload(data if isinstance(data, dict) else None)
