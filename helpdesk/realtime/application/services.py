"""
Realtime Application Services
==============================

The room registry interface and the gateway that orchestrates chat events.

Message flow for ``send_message``:
1. Validate the event (sender only hears about rejections)
2. Broadcast ``receiveMessage`` to the ticket room
3. Append the message to the ticket store
4. Award participation points to staff/admin senders (best effort)

Broadcast never suspends; only the store and directory calls do.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Set

from helpdesk.config import REWARDED_ROLES, VALID_ROLES, settings
from helpdesk.core import (
    ApplicationException,
    InvalidMessage,
    PersistenceFailed,
    RewardFailed,
    TransportException,
)
from helpdesk.realtime.application.dto import MessageErrorView, MessageView
from helpdesk.realtime.domain import Connection, ServerEvent, ServerEvents
from helpdesk.tickets.application import ITicketStore, IUserDirectory
from helpdesk.tickets.domain import Message
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ========== Registry Interface ==========

class IRoomRegistry(ABC):
    """
    Ticket id -> connected participants.

    Implementations must be safe to call from the gateway's event loop
    without suspending; a shared (multi-instance) registry would fan out
    through its own transport behind this same interface.
    """

    @abstractmethod
    def register(self, connection: Connection) -> None:
        """Track a live connection (target of ``broadcast_all``)."""

    @abstractmethod
    def unregister(self, connection: Connection) -> None:
        """Stop tracking a connection."""

    @abstractmethod
    def join(self, connection: Connection, ticket_id: str) -> bool:
        """Add to a room. Returns False if it was already a member."""

    @abstractmethod
    def leave(self, connection: Connection, ticket_id: str) -> bool:
        """Remove from a room. Returns False if it was not a member."""

    @abstractmethod
    def leave_all(self, connection: Connection) -> List[str]:
        """Remove from every room; returns the ticket ids left."""

    @abstractmethod
    def broadcast(self, ticket_id: str, event: ServerEvent) -> int:
        """Deliver to every room member; returns the recipient count."""

    @abstractmethod
    def broadcast_all(self, event: ServerEvent) -> int:
        """Deliver to every registered connection."""

    @abstractmethod
    def members(self, ticket_id: str) -> List[Connection]:
        """Current members of a room (empty when there is no room)."""

    @abstractmethod
    def rooms_of(self, connection: Connection) -> Set[str]:
        """Ticket ids the connection has joined."""


# ========== Gateway ==========

class RealtimeGateway:
    """
    Entry point for every realtime event.

    Errors are reported to the originating connection as ``messageError``
    and never reach the rest of the room.
    """

    def __init__(
        self,
        registry: IRoomRegistry,
        ticket_store: ITicketStore,
        user_directory: IUserDirectory,
        reward_points: Optional[int] = None,
        max_ticket_id_length: Optional[int] = None,
        clock: Clock = utc_now,
    ):
        self._registry = registry
        self._store = ticket_store
        self._users = user_directory
        self._reward_points = settings.chat_reward_points if reward_points is None else reward_points
        self._max_ticket_id_length = settings.max_ticket_id_length if max_ticket_id_length is None else max_ticket_id_length
        self._clock = clock

    @property
    def registry(self) -> IRoomRegistry:
        return self._registry

    # ----- connection lifecycle -----

    def connect(self, connection: Connection) -> None:
        self._registry.register(connection)
        logger.info("Connection opened", extra={"connection_id": connection.id})

    def disconnect(self, connection: Connection) -> None:
        """Drop every membership of ``connection``. No other side effects."""
        left = self._registry.leave_all(connection)
        self._registry.unregister(connection)
        logger.info(
            "Connection closed",
            extra={"connection_id": connection.id, "rooms_left": left}
        )

    # ----- rooms -----

    def join_room(self, connection: Connection, ticket_id: Any) -> bool:
        try:
            ticket_id = self._check_ticket_id(ticket_id)
        except InvalidMessage as e:
            self.report_error(connection, e)
            return False

        if self._registry.join(connection, ticket_id):
            logger.info(
                "Joined ticket room",
                extra={"connection_id": connection.id, "ticket_id": ticket_id}
            )
        return True

    def leave_room(self, connection: Connection, ticket_id: Any) -> bool:
        try:
            ticket_id = self._check_ticket_id(ticket_id)
        except InvalidMessage as e:
            self.report_error(connection, e)
            return False

        return self._registry.leave(connection, ticket_id)

    # ----- chat -----

    async def send_message(
        self,
        connection: Connection,
        ticket_id: Any,
        sender_id: Any,
        sender_display_name: Any,
        role: Any,
        content: Any,
    ) -> Optional[MessageView]:
        """
        Validate, broadcast, persist, then reward.

        Returns the broadcast view, or None when the event was rejected.
        A persistence failure still returns the view: the broadcast stands
        and only the sender is told.
        """
        try:
            ticket_id, sender_id, sender_display_name, role, content = self._validate(
                ticket_id, sender_id, sender_display_name, role, content
            )
        except InvalidMessage as e:
            self.report_error(connection, e)
            return None

        view = MessageView(
            username=sender_display_name,
            role=role,
            message=content,
            timestamp=self._clock(),
        )
        recipients = self._registry.broadcast(
            ticket_id, ServerEvent(ServerEvents.RECEIVE_MESSAGE, view.to_event_data())
        )

        try:
            await self._store.append_message(
                ticket_id,
                Message(
                    sender_id=sender_id,
                    role=role,
                    content=content,
                    created_at=view.timestamp,
                ),
            )
        except Exception as e:
            failure = PersistenceFailed(ticket_id, "Message could not be saved", {"error": str(e)})
            logger.error(
                "Message persistence failed",
                extra={
                    "connection_id": connection.id,
                    "ticket_id": ticket_id,
                    "recipients": recipients,
                    "error": str(e),
                }
            )
            self.report_error(connection, failure)
            return view

        logger.info(
            "Message delivered",
            extra={"ticket_id": ticket_id, "recipients": recipients, "role": role}
        )

        if role in REWARDED_ROLES:
            await self._reward(sender_id)

        return view

    def emit_ticket_update(self, ticket_id: str, update: Dict[str, Any]) -> int:
        """Push ``ticket-update-<ticket_id>`` to every live connection."""
        recipients = self._registry.broadcast_all(
            ServerEvent(ServerEvents.ticket_update(ticket_id), dict(update))
        )
        logger.info(
            "Ticket update emitted",
            extra={"ticket_id": ticket_id, "recipients": recipients}
        )
        return recipients

    def report_error(self, connection: Connection, error: ApplicationException) -> None:
        """Send ``messageError`` to ``connection`` alone."""
        logger.warning(
            "Rejected client event",
            extra={
                "connection_id": connection.id,
                "error_code": error.code,
                "error_message": error.message,
            }
        )
        view = MessageErrorView(error=error.message, code=error.code)
        try:
            connection.deliver(ServerEvent(ServerEvents.MESSAGE_ERROR, view.model_dump()))
        except TransportException as e:
            logger.warning(
                "Could not report error to closed connection",
                extra={"connection_id": connection.id, "error": str(e)}
            )

    # ----- internals -----

    def _check_ticket_id(self, ticket_id: Any) -> str:
        if not isinstance(ticket_id, str) or not ticket_id.strip():
            raise InvalidMessage("ticketId is required", {"field": "ticketId"})
        ticket_id = ticket_id.strip()
        if len(ticket_id) > self._max_ticket_id_length:
            raise InvalidMessage("ticketId is too long", {"field": "ticketId"})
        return ticket_id

    def _validate(self, ticket_id, sender_id, sender_display_name, role, content):
        ticket_id = self._check_ticket_id(ticket_id)

        required = {
            "message": content,
            "userId": sender_id,
            "username": sender_display_name,
            "role": role,
        }
        for name, value in required.items():
            if not isinstance(value, str) or not value:
                raise InvalidMessage(f"{name} is required", {"field": name})

        if not content.strip():
            raise InvalidMessage("message cannot be blank", {"field": "message"})

        role = role.strip().lower()
        if role not in VALID_ROLES:
            raise InvalidMessage(f"role must be one of {VALID_ROLES}", {"field": "role"})

        return ticket_id, sender_id, sender_display_name, role, content

    async def _reward(self, sender_id: str) -> None:
        """Best effort: failures are logged and never surfaced."""
        try:
            total = await self._users.increment_points(sender_id, self._reward_points)
        except Exception as e:
            failure = RewardFailed(sender_id, "Could not award chat points", {"error": str(e)})
            logger.warning(
                failure.message,
                extra={"user_id": sender_id, "error_code": failure.code, "error": str(e)}
            )
            return

        logger.info(
            "Chat points awarded",
            extra={"user_id": sender_id, "points": self._reward_points, "total": total}
        )
