"""
SLA Application Services
=========================

Breach monitor: finds open tickets past their SLA deadline and emails the
assigned staff member.

Each ticket is handled on its own; a lookup or delivery failure is logged
and the scan moves on to the next ticket. Nothing is remembered between
scans, so a ticket that stays overdue is notified again on every scan.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Optional

from helpdesk.config import settings
from helpdesk.core import LookupFailed, NotifyFailed
from helpdesk.sla.domain import (
    BreachNotification,
    EmailTemplate,
    ScanReport,
    high_priority_ticket,
)
from helpdesk.tickets.application import ITicketStore, IUserDirectory
from helpdesk.tickets.domain import Ticket
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

# Per-ticket scan outcomes
NOTIFIED = "notified"
NOT_DELIVERED = "not_delivered"
SKIPPED_UNASSIGNED = "skipped_unassigned"
SKIPPED_NO_EMAIL = "skipped_no_email"


# ========== Notifier Interface ==========

class INotifier(ABC):
    """Interface for outgoing notifications."""

    @abstractmethod
    async def send(self, recipient_email: str, template: EmailTemplate) -> bool:
        """
        Deliver ``template`` to ``recipient_email``.

        Returns False when delivery was skipped (e.g. transport not
        configured). Raises ``NotifyFailed`` when delivery was attempted
        and failed.
        """


# ========== Application Services ==========

class SLAMonitor:
    """
    Scans for breached tickets and drives the notifier.

    The scheduler serializes calls to ``scan``; the monitor itself holds no
    state between scans.
    """

    def __init__(
        self,
        ticket_store: ITicketStore,
        user_directory: IUserDirectory,
        notifier: INotifier,
        base_url: Optional[str] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._store = ticket_store
        self._users = user_directory
        self._notifier = notifier
        self._base_url = base_url or settings.helpdesk_base_url
        self._clock = clock

    async def scan(self, now: Optional[datetime] = None) -> ScanReport:
        """
        Run one breach scan.

        Never raises: a failing overdue query abandons this scan only, and
        per-ticket failures are counted in the report.
        """
        now = now or self._clock()
        report = ScanReport(started_at=now)

        try:
            tickets = await self._store.find_overdue_tickets(now)
        except Exception as e:
            report.aborted = True
            logger.error(
                "SLA scan aborted: overdue ticket query failed",
                extra={"error_type": type(e).__name__, "error": str(e)}
            )
            return report

        report.tickets_found = len(tickets)

        for ticket in tickets:
            try:
                outcome = await self._notify_breach(ticket, now)
            except (LookupFailed, NotifyFailed) as e:
                report.failed += 1
                report.failed_ticket_ids.append(ticket.id)
                logger.error(
                    "SLA breach notification failed",
                    extra={
                        "ticket_id": ticket.id,
                        "error_code": e.code,
                        "error": e.message,
                    }
                )
                continue

            if outcome == NOTIFIED:
                report.notified += 1
            elif outcome == SKIPPED_UNASSIGNED:
                report.skipped_unassigned += 1
            elif outcome == SKIPPED_NO_EMAIL:
                report.skipped_no_email += 1
            elif outcome == NOT_DELIVERED:
                report.not_delivered += 1

        logger.info("SLA scan completed", extra=report.to_dict())
        return report

    async def _notify_breach(self, ticket: Ticket, now: datetime) -> str:
        if not ticket.is_assigned:
            return SKIPPED_UNASSIGNED

        try:
            staff = await self._users.find_user(ticket.assignee_id)
        except Exception as e:
            raise LookupFailed(
                f"Could not load assignee {ticket.assignee_id}",
                {"ticket_id": ticket.id, "error": str(e)}
            ) from e

        if staff is None or not staff.email:
            logger.warning(
                "Assignee has no email, breach not notified",
                extra={"ticket_id": ticket.id, "assignee_id": ticket.assignee_id}
            )
            return SKIPPED_NO_EMAIL

        template = high_priority_ticket(
            BreachNotification(ticket=ticket, staff=staff, observed_at=now),
            self._base_url,
        )

        try:
            delivered = await self._notifier.send(staff.email, template)
        except NotifyFailed:
            raise
        except Exception as e:
            raise NotifyFailed(str(e), {"ticket_id": ticket.id}) from e

        if not delivered:
            return NOT_DELIVERED

        logger.info(
            "SLA breach email sent",
            extra={"ticket_id": ticket.id, "recipient": staff.email}
        )
        return NOTIFIED
