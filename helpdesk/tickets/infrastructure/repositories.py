"""
Ticket Infrastructure Repositories
===================================

SQLAlchemy implementations of the ticket store and user directory.

Every call opens its own session through ``session_context`` so each append
or point increment is a single transaction; conflicting writes from the chat
and from collaborators are serialized by the database.
"""

from datetime import datetime, timezone
from typing import AsyncContextManager, Callable, List, Optional
from uuid import UUID

from sqlalchemy import and_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import TicketStatus
from helpdesk.core import RepositoryException, ResourceNotFoundException
from helpdesk.infrastructure.database import get_session_context
from helpdesk.tickets.application import ITicketStore, IUserDirectory
from helpdesk.tickets.domain import Message, Ticket, User
from helpdesk.tickets.infrastructure.models import (
    TicketMessageModel,
    TicketModel,
    UserModel,
)

SessionContext = Callable[[], AsyncContextManager[AsyncSession]]


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    """Backends without timezone support hand back naive UTC values."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_id(raw: str, resource_type: str) -> UUID:
    try:
        return UUID(str(raw))
    except ValueError:
        raise ResourceNotFoundException(resource_type, str(raw))


def _to_ticket(model: TicketModel) -> Ticket:
    return Ticket(
        id=str(model.id),
        title=model.title,
        status=model.status,
        sla_deadline=_aware(model.sla_deadline),
        assignee_id=str(model.assignee_id) if model.assignee_id else None,
    )


def _to_message(model: TicketMessageModel) -> Message:
    return Message(
        sender_id=str(model.sender_id),
        role=model.role,
        content=model.content,
        created_at=_aware(model.created_at),
    )


def _to_user(model: UserModel) -> User:
    roles = frozenset(r.strip() for r in model.roles.split(",") if r.strip())
    return User(
        id=str(model.id),
        email=model.email,
        name=model.name,
        roles=roles,
        points=model.points,
    )


class SQLAlchemyTicketStore(ITicketStore):
    """
    SQLAlchemy implementation of the ticket store.

    Driver errors are re-raised as ``RepositoryException`` so callers never
    need to know about SQLAlchemy.
    """

    def __init__(self, session_context: SessionContext = get_session_context):
        self._session_context = session_context

    async def get_ticket(self, ticket_id: str) -> Optional[Ticket]:
        """Get ticket by ID."""
        try:
            ticket_uuid = UUID(str(ticket_id))
        except ValueError:
            return None

        try:
            async with self._session_context() as session:
                model = await session.get(TicketModel, ticket_uuid)
                return _to_ticket(model) if model else None
        except SQLAlchemyError as e:
            raise RepositoryException(f"Failed to load ticket {ticket_id}", {"error": str(e)})

    async def find_overdue_tickets(self, now: datetime) -> List[Ticket]:
        """Open tickets whose SLA deadline is before ``now``."""
        stmt = (
            select(TicketModel)
            .where(and_(
                TicketModel.status != TicketStatus.CLOSED,
                TicketModel.sla_deadline < now,
            ))
            .order_by(TicketModel.sla_deadline.asc())
        )

        try:
            async with self._session_context() as session:
                result = await session.execute(stmt)
                return [_to_ticket(m) for m in result.scalars().all()]
        except SQLAlchemyError as e:
            raise RepositoryException("Failed to query overdue tickets", {"error": str(e)})

    async def append_message(self, ticket_id: str, message: Message) -> None:
        """Append a message to the ticket log."""
        ticket_uuid = _parse_id(ticket_id, "Ticket")
        sender_uuid = _parse_id(message.sender_id, "User")

        try:
            async with self._session_context() as session:
                if await session.get(TicketModel, ticket_uuid) is None:
                    raise ResourceNotFoundException("Ticket", ticket_id)

                session.add(TicketMessageModel(
                    ticket_id=ticket_uuid,
                    sender_id=sender_uuid,
                    role=message.role,
                    content=message.content,
                    created_at=message.created_at,
                ))
                await session.flush()
        except SQLAlchemyError as e:
            raise RepositoryException(
                f"Failed to append message to ticket {ticket_id}",
                {"error": str(e)}
            )

    async def list_messages(self, ticket_id: str) -> List[Message]:
        """Messages in append order."""
        ticket_uuid = _parse_id(ticket_id, "Ticket")
        stmt = (
            select(TicketMessageModel)
            .where(TicketMessageModel.ticket_id == ticket_uuid)
            .order_by(TicketMessageModel.id.asc())
        )

        try:
            async with self._session_context() as session:
                result = await session.execute(stmt)
                return [_to_message(m) for m in result.scalars().all()]
        except SQLAlchemyError as e:
            raise RepositoryException(f"Failed to list messages for {ticket_id}", {"error": str(e)})

    async def update_ticket_status(self, ticket_id: str, status: str) -> Ticket:
        """Set ticket status."""
        ticket_uuid = _parse_id(ticket_id, "Ticket")

        try:
            async with self._session_context() as session:
                model = await session.get(TicketModel, ticket_uuid)
                if model is None:
                    raise ResourceNotFoundException("Ticket", ticket_id)

                model.status = status
                model.updated_at = datetime.now(timezone.utc)
                await session.flush()
                return _to_ticket(model)
        except SQLAlchemyError as e:
            raise RepositoryException(f"Failed to update ticket {ticket_id}", {"error": str(e)})


class SQLAlchemyUserDirectory(IUserDirectory):
    """SQLAlchemy implementation of the user directory."""

    def __init__(self, session_context: SessionContext = get_session_context):
        self._session_context = session_context

    async def find_user(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        try:
            user_uuid = UUID(str(user_id))
        except ValueError:
            return None

        try:
            async with self._session_context() as session:
                model = await session.get(UserModel, user_uuid)
                return _to_user(model) if model else None
        except SQLAlchemyError as e:
            raise RepositoryException(f"Failed to load user {user_id}", {"error": str(e)})

    async def increment_points(self, user_id: str, amount: int) -> int:
        """Atomically add points in the database and return the new total."""
        user_uuid = _parse_id(user_id, "User")
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_uuid)
            .values(points=UserModel.points + amount)
        )

        try:
            async with self._session_context() as session:
                result = await session.execute(stmt)
                if result.rowcount == 0:
                    raise ResourceNotFoundException("User", user_id)

                total = await session.scalar(
                    select(UserModel.points).where(UserModel.id == user_uuid)
                )
                return int(total)
        except SQLAlchemyError as e:
            raise RepositoryException(f"Failed to award points to {user_id}", {"error": str(e)})
