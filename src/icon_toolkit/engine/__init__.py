"""
Engine Package

Session state, marking persistence and host message handlers.
"""

from .handlers import HANDLERS, handle_message
from .markings_store import MarkingStore
from .session import EngineConfig, EngineContext, apply_markings

__all__ = [
    "HANDLERS",
    "handle_message",
    "MarkingStore",
    "EngineConfig",
    "EngineContext",
    "apply_markings",
]
