"""
SLA External Service Integrations
==================================

SMTP delivery of breach notifications.

``smtplib`` is blocking, so each send runs in a worker thread and the event
loop keeps serving chat traffic while a mail server is slow.
"""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Optional

from helpdesk.config import Settings, settings as default_settings
from helpdesk.core import NotifyFailed
from helpdesk.sla.application import INotifier
from helpdesk.sla.domain import EmailTemplate
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class SmtpNotifier(INotifier):
    """
    Sends breach emails through an SMTP relay.

    Skips (returns False) when no SMTP host is configured so development
    setups run without a mail server.
    """

    def __init__(self, config: Optional[Settings] = None):
        self._config = config or default_settings

    @property
    def is_configured(self) -> bool:
        return bool(self._config.smtp_host)

    def _build_message(self, recipient_email: str, template: EmailTemplate) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = template.subject
        message["From"] = self._config.smtp_sender
        message["To"] = recipient_email
        message.set_content(template.text_body)
        if template.html_body:
            message.add_alternative(template.html_body, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        cfg = self._config
        with smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=cfg.smtp_timeout_seconds) as smtp:
            if cfg.smtp_starttls:
                smtp.starttls()
            if cfg.smtp_user and cfg.smtp_password:
                smtp.login(cfg.smtp_user, cfg.smtp_password)
            smtp.send_message(message)

    async def send(self, recipient_email: str, template: EmailTemplate) -> bool:
        if not self.is_configured:
            logger.warning(
                "SMTP host not configured, skipping notification",
                extra={"recipient": recipient_email, "subject": template.subject}
            )
            return False

        message = self._build_message(recipient_email, template)

        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            raise NotifyFailed(
                f"SMTP delivery to {recipient_email} failed",
                {"error": str(e), "smtp_host": self._config.smtp_host}
            ) from e

        logger.info(
            "Email sent",
            extra={"recipient": recipient_email, "subject": template.subject}
        )
        return True
