"""
Guest Book Persistence Module

In-memory storage: the shared guest table and the view registry.
"""

from .base import EntityBackend, GuestStore
from .memory import MemoryRepo
from .table import GuestTable

__all__ = [
    "EntityBackend",
    "GuestStore",
    "MemoryRepo",
    "GuestTable",
]
