# =============================================================================
# SLA MONITOR TESTS
# =============================================================================

import smtplib
from datetime import timedelta

import pytest

from helpdesk.config import Settings, TicketStatus, UserRole
from helpdesk.core import NotifyFailed
from helpdesk.sla.application import SLAMonitor
from helpdesk.sla.domain import BreachNotification, high_priority_ticket
from helpdesk.sla.infrastructure import SmtpNotifier
from helpdesk.tickets.domain import User

from tests.fakes import InMemoryTicketStore, RecordingNotifier, make_ticket


def staff(user_id, email):
    return User(id=user_id, email=email, name=user_id.title(), roles=frozenset({UserRole.STAFF}))


@pytest.fixture
def monitor_for(user_directory, now):
    def build(tickets, notifier):
        return SLAMonitor(
            InMemoryTicketStore(tickets),
            user_directory,
            notifier,
            base_url="https://help.example.com",
            clock=lambda: now,
        )
    return build


class TestScan:

    async def test_notifies_assignee_of_overdue_ticket(self, monitor_for, notifier, now):
        monitor = monitor_for([make_ticket("T1", now - timedelta(hours=1), "u-staff")], notifier)

        report = await monitor.scan()

        assert report.notified == 1
        ((recipient, template),) = notifier.sent
        assert recipient == "staff@example.com"
        assert "T1" in template.subject

    async def test_ignores_tickets_within_deadline_or_closed(self, monitor_for, notifier, now):
        monitor = monitor_for([
            make_ticket("future", now + timedelta(minutes=1), "u-staff"),
            make_ticket("closed", now - timedelta(days=2), "u-staff", status=TicketStatus.CLOSED),
        ], notifier)

        report = await monitor.scan()

        assert report.tickets_found == 0
        assert notifier.attempts == []

    async def test_unassigned_ticket_is_skipped(self, monitor_for, notifier, now):
        monitor = monitor_for([make_ticket("T1", now - timedelta(hours=1))], notifier)

        report = await monitor.scan()

        assert report.skipped_unassigned == 1
        assert report.failed == 0
        assert notifier.attempts == []

    async def test_assignee_without_email_is_skipped(self, monitor_for, user_directory, notifier, now):
        user_directory.users["u-silent"] = staff("u-silent", None)
        monitor = monitor_for([
            make_ticket("T1", now - timedelta(hours=1), "u-silent"),
            make_ticket("T2", now - timedelta(hours=1), "u-gone"),
        ], notifier)

        report = await monitor.scan()

        assert report.skipped_no_email == 2
        assert notifier.attempts == []

    async def test_one_failure_does_not_stop_the_scan(self, monitor_for, user_directory, now):
        """Three breached tickets; the second notification raises."""
        for i in (1, 2, 3):
            user_directory.users[f"u{i}"] = staff(f"u{i}", f"s{i}@example.com")
        notifier = RecordingNotifier(fail_for={"s2@example.com"})
        monitor = monitor_for([
            make_ticket(f"T{i}", now - timedelta(minutes=30), f"u{i}") for i in (1, 2, 3)
        ], notifier)

        report = await monitor.scan()

        assert notifier.attempts == ["s1@example.com", "s2@example.com", "s3@example.com"]
        assert [r for r, _ in notifier.sent] == ["s1@example.com", "s3@example.com"]
        assert report.notified == 2
        assert report.failed == 1
        assert report.failed_ticket_ids == ["T2"]

    async def test_lookup_failure_is_isolated(self, monitor_for, user_directory, notifier, now):
        user_directory.fail_lookup_for.add("u-admin")
        monitor = monitor_for([
            make_ticket("T1", now - timedelta(hours=1), "u-admin"),
            make_ticket("T2", now - timedelta(hours=1), "u-staff"),
        ], notifier)

        report = await monitor.scan()

        assert report.failed_ticket_ids == ["T1"]
        assert report.notified == 1

    async def test_unexpected_notifier_error_counts_as_failure(self, monitor_for, now):
        class BrokenNotifier(RecordingNotifier):
            async def send(self, recipient_email, template):
                raise RuntimeError("connection reset")

        monitor = monitor_for([make_ticket("T1", now - timedelta(hours=1), "u-staff")], BrokenNotifier())

        report = await monitor.scan()

        assert report.failed == 1

    async def test_undelivered_send_is_counted_separately(self, monitor_for, now):
        notifier = RecordingNotifier(delivered=False)
        monitor = monitor_for([make_ticket("T1", now - timedelta(hours=1), "u-staff")], notifier)

        report = await monitor.scan()

        assert report.notified == 0
        assert report.failed == 0
        assert report.not_delivered == 1
        assert report.to_dict()["not_delivered"] == 1
        assert notifier.attempts == ["staff@example.com"]

    async def test_failed_query_aborts_the_scan(self, user_directory, notifier, now):
        store = InMemoryTicketStore([make_ticket("T1", now - timedelta(hours=1), "u-staff")])
        store.fail_overdue = True
        monitor = SLAMonitor(store, user_directory, notifier, base_url="http://x")

        report = await monitor.scan(now)

        assert report.aborted is True
        assert notifier.attempts == []

    async def test_still_overdue_ticket_is_notified_every_scan(self, monitor_for, notifier, now):
        monitor = monitor_for([make_ticket("T1", now - timedelta(hours=1), "u-staff")], notifier)

        await monitor.scan()
        await monitor.scan(now + timedelta(hours=1))

        assert notifier.attempts == ["staff@example.com", "staff@example.com"]


class TestBreachEmail:

    def test_template_links_to_ticket(self, staff_user, now):
        ticket = make_ticket("T7", now - timedelta(minutes=90), "u-staff", title="VPN <down>")

        template = high_priority_ticket(
            BreachNotification(ticket=ticket, staff=staff_user, observed_at=now),
            "https://help.example.com/",
        )

        assert template.subject == "[Overdue] Ticket #T7: VPN <down>"
        assert "https://help.example.com/ticket/T7" in template.text_body
        assert "90 minutes ago" in template.text_body
        assert "VPN &lt;down&gt;" in template.html_body
        assert "Sam Staff" in template.text_body


class TestSmtpNotifier:

    async def test_unconfigured_transport_skips_delivery(self, staff_user, now):
        notifier = SmtpNotifier(Settings(smtp_host=None))
        template = high_priority_ticket(
            BreachNotification(
                ticket=make_ticket("T1", now - timedelta(hours=1), "u-staff"),
                staff=staff_user,
                observed_at=now,
            ),
            "http://x",
        )

        assert await notifier.send("staff@example.com", template) is False

    async def test_transport_errors_become_notify_failed(self, staff_user, now, monkeypatch):
        def refuse(*args, **kwargs):
            raise smtplib.SMTPConnectError(421, "try later")

        monkeypatch.setattr(smtplib, "SMTP", refuse)

        notifier = SmtpNotifier(Settings(smtp_host="mail.invalid", smtp_starttls=False))
        template = high_priority_ticket(
            BreachNotification(
                ticket=make_ticket("T1", now - timedelta(hours=1), "u-staff"),
                staff=staff_user,
                observed_at=now,
            ),
            "http://x",
        )

        with pytest.raises(NotifyFailed):
            await notifier.send("staff@example.com", template)
