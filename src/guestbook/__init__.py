"""
Guest Book - a live guest book on FastHTML and Datastar

Server-side view entities push state to the browser over Server-Sent
Events. Guest entries live in a shared in-memory table.
"""

from .config import AppConfig, Environment
from .core import Entity, GuestEntry, event, datastar_script, is_valid
from .entities import GuestBook, GuestComponent
from .persistence import GuestTable, MemoryRepo
from .app import AppContext, LiveSession, QueueTransport, SessionClosedError

__all__ = [
    'AppConfig',
    'Environment',
    'Entity',
    'GuestEntry',
    'event',
    'datastar_script',
    'is_valid',
    'GuestBook',
    'GuestComponent',
    'GuestTable',
    'MemoryRepo',
    'AppContext',
    'LiveSession',
    'QueueTransport',
    'SessionClosedError',
]
