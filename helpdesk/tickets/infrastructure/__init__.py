"""
Ticket Infrastructure Layer
===========================

SQLAlchemy models and the store implementations built on them.
"""

from helpdesk.tickets.infrastructure.models import (
    TicketMessageModel,
    TicketModel,
    UserModel,
)
from helpdesk.tickets.infrastructure.repositories import (
    SQLAlchemyTicketStore,
    SQLAlchemyUserDirectory,
)

__all__ = [
    "TicketMessageModel",
    "TicketModel",
    "UserModel",
    "SQLAlchemyTicketStore",
    "SQLAlchemyUserDirectory",
]
