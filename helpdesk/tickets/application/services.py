"""
Ticket Application Services
============================

Store interfaces the rest of the system depends on, plus the small service
collaborators use to change ticket status.

Following SOLID principles:
- Dependency Inversion: the gateway and the SLA monitor depend on these
  abstractions, never on the SQLAlchemy implementations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from helpdesk.config import VALID_STATUSES
from helpdesk.core import ResourceNotFoundException, ValidationException
from helpdesk.tickets.domain import Message, Ticket, User
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


# ========== Store Interfaces (Dependency Inversion) ==========

class ITicketStore(ABC):
    """Interface for ticket persistence."""

    @abstractmethod
    async def get_ticket(self, ticket_id: str) -> Optional[Ticket]:
        """Get a ticket (without its message log) or None."""

    @abstractmethod
    async def find_overdue_tickets(self, now: datetime) -> List[Ticket]:
        """Tickets whose status is not closed and whose SLA deadline is before ``now``."""

    @abstractmethod
    async def append_message(self, ticket_id: str, message: Message) -> None:
        """Append a message to the ticket's log in its own transaction."""

    @abstractmethod
    async def list_messages(self, ticket_id: str) -> List[Message]:
        """Messages of a ticket in the order they were appended."""

    @abstractmethod
    async def update_ticket_status(self, ticket_id: str, status: str) -> Ticket:
        """Set a ticket's status and return the updated ticket."""


class IUserDirectory(ABC):
    """Interface for user lookups and point bookkeeping."""

    @abstractmethod
    async def find_user(self, user_id: str) -> Optional[User]:
        """Get a user or None."""

    @abstractmethod
    async def increment_points(self, user_id: str, amount: int) -> int:
        """Add ``amount`` points to a user and return the new total."""


# ========== Application Services ==========

class TicketService:
    """Status changes and message history for collaborators (HTTP layer)."""

    def __init__(self, ticket_store: ITicketStore):
        self._store = ticket_store

    async def change_status(self, ticket_id: str, status: str) -> Ticket:
        if status not in VALID_STATUSES:
            raise ValidationException(
                f"status must be one of {VALID_STATUSES}",
                {"status": status}
            )

        ticket = await self._store.update_ticket_status(ticket_id, status)
        logger.info(
            "Ticket status changed",
            extra={"ticket_id": ticket_id, "status": status}
        )
        return ticket

    async def message_history(self, ticket_id: str) -> List[Message]:
        if await self._store.get_ticket(ticket_id) is None:
            raise ResourceNotFoundException("Ticket", ticket_id)
        return await self._store.list_messages(ticket_id)
