"""
Ticket Interfaces Layer
=======================

HTTP routes used by collaborators.
"""

from helpdesk.tickets.interfaces.controllers import router as tickets_router

__all__ = ["tickets_router"]
