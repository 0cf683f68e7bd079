"""
Ticket Controllers (API Routes)
================================

Collaborator endpoints: change a ticket's status (and push the change to
every live chat client) and read back the persisted chat log.

Controllers are thin - they delegate to application services.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from helpdesk.realtime.application import RealtimeGateway
from helpdesk.tickets.application import TicketService
from helpdesk.tickets.application.dto import (
    MessageHistoryResponse,
    MessageResponse,
    StatusUpdateRequest,
    TicketResponse,
)
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/tickets", tags=["Tickets"])


# ========== Dependencies ==========

def get_ticket_service(request: Request) -> TicketService:
    return TicketService(request.app.state.ticket_store)


def get_gateway(request: Request) -> RealtimeGateway:
    return request.app.state.gateway


# ========== Route Handlers ==========

@router.patch("/{ticket_id}/status", response_model=TicketResponse)
async def update_status(
    ticket_id: str,
    body: StatusUpdateRequest,
    service: TicketService = Depends(get_ticket_service),
    gateway: RealtimeGateway = Depends(get_gateway),
) -> TicketResponse:
    """Change status, then emit ``ticket-update-<id>`` to every connection."""
    ticket = await service.change_status(ticket_id, body.status)

    gateway.emit_ticket_update(ticket.id, {
        "ticketId": ticket.id,
        "status": ticket.status,
        "updatedAt": datetime.now(timezone.utc).isoformat(),
    })
    return TicketResponse.from_entity(ticket)


@router.get("/{ticket_id}/messages", response_model=MessageHistoryResponse)
async def list_messages(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service),
) -> MessageHistoryResponse:
    """Persisted chat log in append order."""
    messages = await service.message_history(ticket_id)
    return MessageHistoryResponse(
        ticket_id=ticket_id,
        messages=[MessageResponse.from_entity(m) for m in messages],
    )
