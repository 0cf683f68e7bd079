"""
In-Memory Room Registry
========================

Single-process implementation of ``IRoomRegistry``.

Rooms are dicts keyed by connection id, so membership is idempotent and
fan-out follows join order. A room is dropped as soon as its last member
leaves; nothing survives a restart and clients re-join after reconnecting.
"""

from typing import Dict, List, Set

from helpdesk.core import TransportException
from helpdesk.realtime.application.services import IRoomRegistry
from helpdesk.realtime.domain import Connection, ServerEvent
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class InMemoryRoomRegistry(IRoomRegistry):
    """Room membership held in plain dicts, owned by one gateway."""

    def __init__(self):
        self._rooms: Dict[str, Dict[str, Connection]] = {}
        self._connections: Dict[str, Connection] = {}

    def register(self, connection: Connection) -> None:
        self._connections[connection.id] = connection

    def unregister(self, connection: Connection) -> None:
        self._connections.pop(connection.id, None)

    def join(self, connection: Connection, ticket_id: str) -> bool:
        room = self._rooms.setdefault(ticket_id, {})
        if connection.id in room:
            return False
        room[connection.id] = connection
        return True

    def leave(self, connection: Connection, ticket_id: str) -> bool:
        room = self._rooms.get(ticket_id)
        if room is None or room.pop(connection.id, None) is None:
            return False
        if not room:
            del self._rooms[ticket_id]
        return True

    def leave_all(self, connection: Connection) -> List[str]:
        left = [ticket_id for ticket_id, room in self._rooms.items() if connection.id in room]
        for ticket_id in left:
            self.leave(connection, ticket_id)
        return left

    def broadcast(self, ticket_id: str, event: ServerEvent) -> int:
        room = self._rooms.get(ticket_id)
        if not room:
            logger.debug("Broadcast to empty room dropped", extra={"ticket_id": ticket_id})
            return 0
        return self._fan_out(list(room.values()), event)

    def broadcast_all(self, event: ServerEvent) -> int:
        return self._fan_out(list(self._connections.values()), event)

    def members(self, ticket_id: str) -> List[Connection]:
        return list(self._rooms.get(ticket_id, {}).values())

    def rooms_of(self, connection: Connection) -> Set[str]:
        return {ticket_id for ticket_id, room in self._rooms.items() if connection.id in room}

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def _fan_out(self, targets: List[Connection], event: ServerEvent) -> int:
        delivered = 0
        for connection in targets:
            try:
                connection.deliver(event)
            except TransportException as e:
                logger.warning(
                    "Delivery failed",
                    extra={"connection_id": connection.id, "event": event.name, "error": str(e)}
                )
                continue
            delivered += 1
        return delivered
