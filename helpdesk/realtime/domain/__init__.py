"""
Realtime Domain Layer
=====================

Connection abstraction and event names. No I/O.
"""

from helpdesk.realtime.domain.entities import (
    ClientEvents,
    Connection,
    ServerEvent,
    ServerEvents,
)

__all__ = ["ClientEvents", "Connection", "ServerEvent", "ServerEvents"]
