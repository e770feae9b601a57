"""
Guest Book Core Module

Domain layer: view entities, events, signals and guest entries.
"""

from .entity import Entity, datastar_script, nest_signals
from .events import event, DatastarPayload, EventInfo, extract_datastar_payload, payload_from_query_params
from .guest import GuestEntry, is_valid
from .signals import EventMethodDescriptor, SignalDescriptor

__all__ = [
    "Entity",
    "datastar_script",
    "nest_signals",
    "event",
    "DatastarPayload",
    "EventInfo",
    "extract_datastar_payload",
    "payload_from_query_params",
    "GuestEntry",
    "is_valid",
    "EventMethodDescriptor",
    "SignalDescriptor",
]
