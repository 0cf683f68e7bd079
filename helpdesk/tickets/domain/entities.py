"""
Ticket Domain Entities
=======================

Pure Python entities for tickets, their chat log and the users taking part.

These are the shapes the realtime gateway and the SLA monitor work with;
the SQLAlchemy models in the infrastructure layer map onto them.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import FrozenSet, Optional

from helpdesk.config import TicketStatus, UserRole, VALID_ROLES


@dataclass(frozen=True)
class Message:
    """
    One chat entry on a ticket.

    Immutable once created; tickets only ever append these.
    """

    sender_id: str
    role: str
    content: str
    created_at: datetime

    def __post_init__(self):
        if not self.content or not self.content.strip():
            raise ValueError("content cannot be blank")
        if self.role not in VALID_ROLES:
            raise ValueError(f"role must be one of {VALID_ROLES}")


@dataclass
class Ticket:
    """Support ticket with its SLA deadline."""

    id: str
    title: str
    status: str
    sla_deadline: datetime
    assignee_id: Optional[str] = None

    @property
    def is_open(self) -> bool:
        """Anything not closed still counts against the SLA."""
        return self.status != TicketStatus.CLOSED

    @property
    def is_assigned(self) -> bool:
        return bool(self.assignee_id)

    def is_breached(self, now: datetime) -> bool:
        """Open and past its deadline at ``now``."""
        return self.is_open and self.sla_deadline < now


@dataclass
class User:
    """Helpdesk user as seen by the chat and the SLA monitor."""

    id: str
    email: Optional[str]
    name: str
    roles: FrozenSet[str] = frozenset({UserRole.CUSTOMER})
    points: int = 0

    def __post_init__(self):
        if self.points < 0:
            raise ValueError("points cannot be negative")
