"""
Ticket Application DTOs
========================

Pydantic models for the ticket collaborator endpoints.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from helpdesk.tickets.domain import Message, Ticket


TicketStatusStr = Literal["open", "in_progress", "waiting_user", "closed"]


class StatusUpdateRequest(BaseModel):
    """Request model for a status change."""
    status: TicketStatusStr = Field(..., description="New ticket status")


class TicketResponse(BaseModel):
    """Ticket summary (no message log)."""
    id: str
    title: str
    status: str
    assignee_id: Optional[str] = None
    sla_deadline: datetime

    @classmethod
    def from_entity(cls, ticket: Ticket) -> "TicketResponse":
        return cls(
            id=ticket.id,
            title=ticket.title,
            status=ticket.status,
            assignee_id=ticket.assignee_id,
            sla_deadline=ticket.sla_deadline,
        )


class MessageResponse(BaseModel):
    """One persisted chat message."""
    sender_id: str
    role: str
    content: str
    created_at: datetime

    @classmethod
    def from_entity(cls, message: Message) -> "MessageResponse":
        return cls(
            sender_id=message.sender_id,
            role=message.role,
            content=message.content,
            created_at=message.created_at,
        )


class MessageHistoryResponse(BaseModel):
    ticket_id: str
    messages: List[MessageResponse]
