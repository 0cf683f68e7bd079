"""
SLA Infrastructure Layer
========================

External integrations: SMTP notifier.
"""

from helpdesk.sla.infrastructure.external import SmtpNotifier

__all__ = ["SmtpNotifier"]
