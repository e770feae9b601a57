"""
Application Service Layer

Bridge between the web layer and the view entities:
- context: the store, view registry, sessions and RNG of one application
- session: per-connection actors with their command inbox and tick timer
- dispatcher: request -> command binding and response rendering
"""

from .context import AppContext
from .dispatcher import Dispatcher, is_datastar_request
from .session import (Command, LiveSession, PeriodicTimer, QueueTransport, SessionClosedError,
                      SessionRegistry, Transport, ViewUpdate, apply_command, full_state)

__all__ = [
    'AppContext',
    'Dispatcher',
    'is_datastar_request',
    'Command',
    'LiveSession',
    'PeriodicTimer',
    'QueueTransport',
    'SessionClosedError',
    'SessionRegistry',
    'Transport',
    'ViewUpdate',
    'apply_command',
    'full_state',
]
