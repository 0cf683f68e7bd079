"""
Helpdesk realtime collaboration service.

Ticket chat rooms over WebSocket plus a periodic SLA breach monitor.
"""

__version__ = "1.0.0"
