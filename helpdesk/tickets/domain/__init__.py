"""
Ticket Domain Layer
===================

Pure Python entities: Ticket, Message, User.
"""

from helpdesk.tickets.domain.entities import Message, Ticket, User

__all__ = ["Message", "Ticket", "User"]
