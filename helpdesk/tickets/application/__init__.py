"""
Ticket Application Layer
========================

Store interfaces and the ticket service. Depends on the domain layer only.
"""

from helpdesk.tickets.application.services import (
    ITicketStore,
    IUserDirectory,
    TicketService,
)

__all__ = ["ITicketStore", "IUserDirectory", "TicketService"]
