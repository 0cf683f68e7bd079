"""
Realtime Interfaces Layer
=========================

WebSocket route handlers.
"""

from helpdesk.realtime.interfaces.controllers import router as realtime_router

__all__ = ["realtime_router"]
