"""
Realtime Application Layer
==========================

Contains:
- Services: the room registry interface and the realtime gateway
- DTOs: payload models of the WebSocket event protocol
"""

from helpdesk.realtime.application.dto import (
    InboundEvent,
    JoinTicketRequest,
    SendMessageRequest,
    MessageView,
    MessageErrorView,
)
from helpdesk.realtime.application.services import (
    IRoomRegistry,
    RealtimeGateway,
)

__all__ = [
    # DTOs
    "InboundEvent",
    "JoinTicketRequest",
    "SendMessageRequest",
    "MessageView",
    "MessageErrorView",
    # Services
    "IRoomRegistry",
    "RealtimeGateway",
]
