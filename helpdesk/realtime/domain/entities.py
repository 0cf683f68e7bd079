"""
Realtime Domain Entities
=========================

Connections and the events pushed to them.

A ``Connection`` is anything a room can deliver to. Delivery never suspends:
implementations queue the event and push it out on their own, preserving
the order in which events were delivered.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class ServerEvent:
    """Outbound event: a name plus a JSON-serializable payload."""

    name: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.name, "data": self.data}


class ServerEvents:
    """Names of events the gateway emits."""
    RECEIVE_MESSAGE = "receiveMessage"
    MESSAGE_ERROR = "messageError"

    @staticmethod
    def ticket_update(ticket_id: str) -> str:
        return f"ticket-update-{ticket_id}"


class ClientEvents:
    """Names of events clients send."""
    JOIN_TICKET = "joinTicket"
    LEAVE_TICKET = "leaveTicket"
    SEND_MESSAGE = "sendMessage"


class Connection(ABC):
    """
    A connected participant.

    Identity is the ``id``; two handles with the same id are the same
    participant connection as far as rooms are concerned.
    """

    id: str

    @abstractmethod
    def deliver(self, event: ServerEvent) -> None:
        """Queue ``event`` for this connection without suspending."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"
