"""
SLA Interfaces Layer
====================

Manual scan trigger for operators.
"""

from helpdesk.sla.interfaces.controllers import router as sla_router

__all__ = ["sla_router"]
