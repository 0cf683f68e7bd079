"""
SLA Value Objects
==================

Immutable values produced by the breach monitor: the notification for one
breached ticket, the email it turns into, and the summary of a scan.
"""

from dataclasses import dataclass, field
from datetime import datetime
from html import escape
from typing import Optional

from helpdesk.tickets.domain import Ticket, User


@dataclass(frozen=True)
class BreachNotification:
    """One breached ticket and the staff member it is escalated to."""

    ticket: Ticket
    staff: User
    observed_at: datetime

    @property
    def deadline(self) -> datetime:
        return self.ticket.sla_deadline

    @property
    def overdue_minutes(self) -> int:
        return max(0, int((self.observed_at - self.deadline).total_seconds() // 60))


@dataclass(frozen=True)
class EmailTemplate:
    """Rendered email ready for a notifier."""

    subject: str
    text_body: str
    html_body: Optional[str] = None


def high_priority_ticket(notification: BreachNotification, base_url: str) -> EmailTemplate:
    """Overdue-ticket email sent to the assigned staff member."""
    ticket = notification.ticket
    staff = notification.staff
    link = f"{base_url.rstrip('/')}/ticket/{ticket.id}"
    deadline = notification.deadline.strftime("%Y-%m-%d %H:%M UTC")

    subject = f"[Overdue] Ticket #{ticket.id}: {ticket.title}"
    text_body = (
        f"Hello {staff.name},\n\n"
        f"Ticket #{ticket.id} \"{ticket.title}\" assigned to you has passed its SLA deadline "
        f"({deadline}, {notification.overdue_minutes} minutes ago) and is still {ticket.status}.\n\n"
        f"Please respond as soon as possible: {link}\n"
    )
    html_body = (
        f"<p>Hello {escape(staff.name)},</p>"
        f"<p>Ticket <strong>#{escape(ticket.id)}</strong> &ldquo;{escape(ticket.title)}&rdquo; "
        f"assigned to you has passed its SLA deadline ({deadline}, "
        f"{notification.overdue_minutes} minutes ago) and is still "
        f"<strong>{escape(ticket.status)}</strong>.</p>"
        f"<p><a href=\"{escape(link)}\">Open the ticket</a></p>"
    )
    return EmailTemplate(subject=subject, text_body=text_body, html_body=html_body)


@dataclass
class ScanReport:
    """Outcome of one breach scan."""

    started_at: datetime
    tickets_found: int = 0
    notified: int = 0
    skipped_unassigned: int = 0
    skipped_no_email: int = 0
    not_delivered: int = 0
    failed: int = 0
    aborted: bool = False
    failed_ticket_ids: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "started_at": self.started_at.isoformat(),
            "tickets_found": self.tickets_found,
            "notified": self.notified,
            "skipped_unassigned": self.skipped_unassigned,
            "skipped_no_email": self.skipped_no_email,
            "not_delivered": self.not_delivered,
            "failed": self.failed,
            "aborted": self.aborted,
            "failed_ticket_ids": list(self.failed_ticket_ids),
        }
