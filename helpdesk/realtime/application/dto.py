"""
Realtime Application DTOs
==========================

Pydantic models for the WebSocket event protocol.

Inbound frames are ``{"event": <name>, "data": <payload>}``. Payload fields
are loosely typed here: presence, type and emptiness checks belong to the
gateway so every rejection is reported the same way.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _scalar_to_str(v: Any) -> Any:
    """Clients send numeric ids; the store keys everything by string."""
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return str(v)
    return v


class InboundEvent(BaseModel):
    """Envelope of every client frame."""
    event: str = Field(..., min_length=1)
    data: Any = None


class JoinTicketRequest(BaseModel):
    """``joinTicket`` / ``leaveTicket`` payload."""
    model_config = ConfigDict(populate_by_name=True)

    ticket_id: Optional[str] = Field(None, alias="ticketId")

    @field_validator("ticket_id", mode="before")
    @classmethod
    def coerce_ids(cls, v: Any) -> Any:
        return _scalar_to_str(v)

    @classmethod
    def from_data(cls, data: Any) -> "JoinTicketRequest":
        """Accept either a bare ticket id or ``{"ticketId": ...}``."""
        if isinstance(data, dict):
            return cls.model_validate(data)
        return cls(ticket_id=data)


class SendMessageRequest(BaseModel):
    """``sendMessage`` payload."""
    model_config = ConfigDict(populate_by_name=True)

    ticket_id: Any = Field(None, alias="ticketId")
    message: Any = None
    user_id: Any = Field(None, alias="userId")
    username: Any = None
    role: Any = None

    @field_validator("ticket_id", "user_id", mode="before")
    @classmethod
    def coerce_ids(cls, v: Any) -> Any:
        return _scalar_to_str(v)


class MessageView(BaseModel):
    """``receiveMessage`` payload broadcast to the room."""
    username: str
    role: str
    message: str
    timestamp: datetime

    def to_event_data(self) -> dict:
        return self.model_dump(mode="json")


class MessageErrorView(BaseModel):
    """``messageError`` payload sent to the originating connection only."""
    error: str
    code: str
