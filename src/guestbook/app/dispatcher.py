"""
Command Dispatcher

Turns HTTP requests into view commands. It discovers @event methods on
entity classes, registers a route per event plus a live SSE stream for live
entities, routes each command to the view's live session (or applies it
directly) and renders the result as Datastar SSE or JSON.
"""

import inspect
import logging
from typing import Any, AsyncGenerator, Callable, Dict, List, Optional, Type

from datastar_py import SSE_HEADERS
from datastar_py import ServerSentEventGenerator as SSE
from fastcore.xml import FT, to_xml
from starlette.requests import Request
from starlette.responses import JSONResponse, StreamingResponse

from ..core.entity import Entity
from ..core.events import DatastarPayload, EventInfo, extract_datastar_payload
from .context import AppContext
from .session import (Command, LiveSession, QueueTransport, SessionClosedError,
                      ViewUpdate, apply_command)

logger = logging.getLogger(__name__)


def is_datastar_request(request: Request) -> bool:
    """Check if the request is a Datastar request."""
    return "Datastar-Request" in request.headers


def _coerce(anno: Any, value: Any) -> Any:
    if anno is inspect.Parameter.empty or value is None:
        return value
    if anno is bool:
        return value if isinstance(value, bool) else str(value).lower() in ('true', '1', 'yes')
    if anno in (int, float, str):
        return anno(value)
    return value


def resolve_event_args(event_info: EventInfo, query_params, client_values: Dict[str, Any]) -> Dict[str, Any]:
    """
    Resolve event arguments.

    Priority: query parameters, then the view's namespaced signals, then the
    parameter defaults (left out so the method applies them).
    """
    kwargs = {}
    for p in event_info.params:
        if p.name == "id":
            continue
        if p.name in query_params:
            kwargs[p.name] = _coerce(p.annotation, query_params[p.name])
        elif p.name in client_values:
            kwargs[p.name] = _coerce(p.annotation, client_values[p.name])
    return kwargs


class Dispatcher:
    """
    Base dispatcher for entity event routing and execution.

    This is the core orchestrator that:
    1. Discovers @event methods on entity classes
    2. Creates route handlers for web frameworks
    3. Routes commands through live sessions or applies them directly
    4. Converts updates to appropriate responses
    """

    def __init__(self, context: AppContext):
        self.context = context
        self.routes: Dict[str, str] = {}

    def _register_route(self, router, path: str, handler: Callable, methods: List[str], name: str):
        """
        Register a route with the framework router.

        Base implementation - MUST be overridden by framework-specific dispatchers.
        """
        raise NotImplementedError("Subclasses must implement _register_route")

    def discover_events(self, entity_class: Type[Entity]) -> Dict[str, EventInfo]:
        """Discover all @event decorated methods on an entity class."""
        return entity_class.events()

    def include_entity(self, router, entity_class: Type[Entity], base_path: str = "") -> None:
        """
        Register a single entity class with the router.

        Args:
            router: Framework router
            entity_class: Entity class containing @event methods
            base_path: Optional base path for routes
        """
        prefix = entity_class.route_prefix()
        for event_name, event_info in self.discover_events(entity_class).items():
            event_path = event_info.path or f"/{prefix}/{event_name}"
            path = f"/{base_path.strip('/')}{event_path}" if base_path else event_path
            name = f"{prefix}_{event_name}"
            handler = self._create_route_handler(entity_class, event_name, event_info)
            self._register_route(router, path, handler, [event_info.method], name)
            self.routes[name] = path

        if entity_class.is_live():
            path = f"/{base_path.strip('/')}/{prefix}/connect" if base_path else f"/{prefix}/connect"
            name = f"{prefix}_connect"
            self._register_route(router, path, self._create_connect_handler(entity_class), ["GET"], name)
            self.routes[name] = path

        logger.debug(f"Registered routes for {entity_class.__name__}")

    def include_entities(self, router, entity_classes: Optional[List[Type[Entity]]] = None, base_path: str = ""):
        """Register multiple entity classes with the router."""
        if not entity_classes:
            entity_classes = Entity.__subclasses__()
        for entity_class in entity_classes:
            self.include_entity(router, entity_class, base_path)

    def _view_id(self, entity_class: Type[Entity], request: Request, payload: DatastarPayload) -> Optional[str]:
        view_id = request.query_params.get("id")
        if view_id:
            return view_id
        return payload.dig(entity_class.class_namespace() or "").get("id")

    def _unknown_view(self, entity_class: Type[Entity], view_id: Optional[str]) -> JSONResponse:
        logger.warning(f"Event for unknown {entity_class.__name__} view: {view_id!r}")
        return JSONResponse({"success": False, "error": "unknown view"}, status_code=404)

    def _create_route_handler(self, entity_class: Type[Entity], event_name: str, event_info: EventInfo) -> Callable:
        """Create a route handler that executes an entity event."""
        async def handler(request: Request):
            payload = await extract_datastar_payload(request)
            view_id = self._view_id(entity_class, request, payload)
            view = self.context.views.load_entity_sync(view_id) if view_id else None
            if not isinstance(view, entity_class):
                return self._unknown_view(entity_class, view_id)

            client_values = payload.dig(view.namespace) if view.namespace else payload.raw_data
            command = Command(event_name,
                              resolve_event_args(event_info, request.query_params, client_values),
                              client_values)
            update, via_session = await self.call_event(view, command)
            return self.command_to_response(update, view, event_info, request, via_session)

        handler.__name__ = f"{entity_class.route_prefix()}_{event_name}"
        return handler

    async def call_event(self, view: Entity, command: Command):
        """Apply a command through the view's live session, or directly when it has none."""
        session = self.context.sessions.get(view.id)
        if session is not None:
            try:
                return await session.dispatch(command), True
            except SessionClosedError:
                logger.info(f"Session for {view.id} closed, applying '{command.name}' directly")
        return apply_command(view, command), False

    def _create_connect_handler(self, entity_class: Type[Entity]) -> Callable:
        """Create the handler for the live SSE stream of an entity class."""
        async def handler(request: Request):
            view_id = request.query_params.get("id")
            if not view_id:
                return self._unknown_view(entity_class, view_id)
            view = self.context.views.load_entity_sync(view_id)
            if not isinstance(view, entity_class):
                view = entity_class.from_context(self.context, id=view_id)
            self.context.track(view)

            transport = QueueTransport()
            session = LiveSession(view, transport, tick_interval=self.context.config.guestbook.tick_interval)
            self.context.sessions.attach(session)
            await session.start()
            return StreamingResponse(self._live_stream(session, transport),
                                     media_type="text/event-stream",
                                     headers=SSE_HEADERS)

        handler.__name__ = f"{entity_class.route_prefix()}_connect"
        return handler

    async def _live_stream(self, session: LiveSession, transport: QueueTransport) -> AsyncGenerator[str, None]:
        try:
            async for update in transport.updates():
                for sse_event in self.update_to_sse(update):
                    yield sse_event
        finally:
            session.close()
            self.context.sessions.detach(session)
            if self.context.sessions.get(session.id) is None:
                self.context.views.delete_entity_sync(session.id)

    def command_to_response(self, update: ViewUpdate, view: Entity, event_info: Optional[EventInfo],
                            request: Request, via_session: bool = False) -> Any:
        """
        Convert an applied command to an HTTP response.

        - Datastar requests get SSE; empty when the update went out over the live stream
        - JSON requests get the full view state
        - Anything else gets SSE
        """
        selector = getattr(event_info, 'selector', None)
        merge_mode = getattr(event_info, 'merge_mode', 'morph')

        if is_datastar_request(request):
            events = [] if via_session else list(self.update_to_sse(update, selector, merge_mode))
            return self._sse_response(events)

        if 'application/json' in request.headers.get('accept', ''):
            return JSONResponse({'success': True, 'entity': view.state()})

        return self._sse_response(list(self.update_to_sse(update, selector, merge_mode)))

    def _sse_response(self, events: List[str]) -> StreamingResponse:
        async def stream():
            for sse_event in events:
                yield sse_event
        return StreamingResponse(stream(), media_type="text/event-stream", headers=SSE_HEADERS)

    def update_to_sse(self, update: ViewUpdate, selector: Optional[str] = None, merge_mode: str = 'morph'):
        """Render a ViewUpdate as Datastar SSE events."""
        if update.signals:
            yield SSE.merge_signals(update.signals)
        for item in update.fragments:
            fragment = self._render_fragment(item)
            if fragment:
                yield self._create_fragment_event(fragment, selector, merge_mode)

    def _create_fragment_event(self, fragment: str, selector: Optional[str] = None, merge_mode: str = 'morph') -> str:
        """Create a properly formatted SSE fragment event."""
        if selector:
            return SSE.merge_fragments(fragment, selector=selector, merge_mode=merge_mode)
        return SSE.merge_fragments(fragment, merge_mode=merge_mode)

    def _render_fragment(self, item: Any) -> Optional[str]:
        """Render an item to an HTML fragment string, or None if not renderable."""
        if item is None:
            return None
        if hasattr(item, '__ft__') or isinstance(item, FT):
            return to_xml(item)
        if isinstance(item, str):
            return item
        return None
