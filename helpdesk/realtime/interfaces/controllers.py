"""
Realtime Controllers
=====================

WebSocket endpoint for ticket chat.

Each socket gets one reader loop (this handler), so a client's events are
processed strictly in the order they arrive. Transport failures end the
loop and always run the disconnect cleanup.
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from helpdesk.core import InvalidEvent
from helpdesk.realtime.application import (
    InboundEvent,
    JoinTicketRequest,
    RealtimeGateway,
    SendMessageRequest,
)
from helpdesk.realtime.domain import ClientEvents, Connection
from helpdesk.realtime.infrastructure import WebSocketConnection
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["Realtime"])


async def dispatch_event(gateway: RealtimeGateway, connection: Connection, raw: str) -> None:
    """Parse one client frame and hand it to the gateway."""
    try:
        inbound = InboundEvent.model_validate_json(raw)
    except ValidationError:
        gateway.report_error(connection, InvalidEvent("Event must be a JSON object with an 'event' name"))
        return

    try:
        if inbound.event == ClientEvents.JOIN_TICKET:
            request = JoinTicketRequest.from_data(inbound.data)
            gateway.join_room(connection, request.ticket_id)

        elif inbound.event == ClientEvents.LEAVE_TICKET:
            request = JoinTicketRequest.from_data(inbound.data)
            gateway.leave_room(connection, request.ticket_id)

        elif inbound.event == ClientEvents.SEND_MESSAGE:
            if not isinstance(inbound.data, dict):
                raise InvalidEvent("sendMessage expects an object payload")
            request = SendMessageRequest.model_validate(inbound.data)
            await gateway.send_message(
                connection,
                ticket_id=request.ticket_id,
                sender_id=request.user_id,
                sender_display_name=request.username,
                role=request.role,
                content=request.message,
            )

        else:
            raise InvalidEvent(f"Unknown event '{inbound.event}'", {"event": inbound.event})

    except ValidationError as e:
        gateway.report_error(
            connection,
            InvalidEvent(f"Malformed '{inbound.event}' payload", {"errors": e.errors()})
        )
    except InvalidEvent as e:
        gateway.report_error(connection, e)


@router.websocket("/ws")
async def ticket_chat(websocket: WebSocket):
    """Ticket chat socket. Clients join rooms with ``joinTicket``."""
    gateway: RealtimeGateway = websocket.app.state.gateway

    await websocket.accept()
    connection = WebSocketConnection(websocket)
    connection.start()
    gateway.connect(connection)

    try:
        while True:
            raw = await websocket.receive_text()
            await dispatch_event(gateway, connection, raw)
    except WebSocketDisconnect as e:
        logger.info(
            "Client disconnected",
            extra={"connection_id": connection.id, "close_code": e.code}
        )
    except Exception as e:
        logger.error(
            "Connection error",
            extra={"connection_id": connection.id, "error_type": type(e).__name__, "error": str(e)}
        )
    finally:
        gateway.disconnect(connection)
        await connection.close()
