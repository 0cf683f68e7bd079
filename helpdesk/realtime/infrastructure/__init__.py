"""
Realtime Infrastructure Layer
=============================

In-memory room registry and WebSocket-backed connections.
"""

from helpdesk.realtime.infrastructure.registry import InMemoryRoomRegistry
from helpdesk.realtime.infrastructure.connections import WebSocketConnection

__all__ = ["InMemoryRoomRegistry", "WebSocketConnection"]
