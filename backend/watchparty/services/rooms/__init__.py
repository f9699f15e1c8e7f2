"""Room domain services: registry, fan-out and per-connection sessions.

This package holds the in-memory room logic used by the Socket.IO event
handlers and the HTTP health route, keeping transport concerns separated
from room state.
"""

from .registry import RoomRegistry
from .broadcaster import Broadcaster
from .sessions import SessionHandler

__all__ = ['RoomRegistry', 'Broadcaster', 'SessionHandler']
