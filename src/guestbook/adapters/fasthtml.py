"""
FastHTML Web Adapter

Provides a configure_app function that wires the guest book views into a
FastHTML app. Uses FastHTMLDispatcher internally.
"""

import logging
from typing import Callable, List, Optional, Type

from ..app.context import AppContext
from ..app.dispatcher import Dispatcher
from ..core.entity import Entity

logger = logging.getLogger(__name__)


class FastHTMLDispatcher(Dispatcher):
    """FastHTML-specific dispatcher that only overrides what's needed."""

    def _register_route(self, router, path: str, handler: Callable, methods: List[str], name: str):
        """Register route using FastHTML's decorator pattern."""
        router(path, methods=[m.lower() for m in methods], name=name)(handler)


def configure_app(app, rt, context: AppContext, entity_classes: Optional[List[Type[Entity]]] = None):
    """
    Configure a FastHTML app with guest book entities.

    ```python
    app, rt = fast_app()
    configure_app(app, rt, AppContext.create(config))
    ```

    Args:
        app: FastHTML app instance
        rt: FastHTML router instance
        context: Application context shared by all routes
        entity_classes: Entities to register. If None, registers all Entity subclasses.

    Returns:
        The configured app instance
    """
    dispatcher = FastHTMLDispatcher(context)
    dispatcher.include_entities(rt, entity_classes)
    app.state.context = context
    app.state.dispatcher = dispatcher
    logger.info(f"Registered {len(dispatcher.routes)} entity routes")
    return app
