"""
SLA Domain Layer
================

Value objects for breach notifications, rendered emails and scan reports.
"""

from helpdesk.sla.domain.value_objects import (
    BreachNotification,
    EmailTemplate,
    ScanReport,
    high_priority_ticket,
)

__all__ = [
    "BreachNotification",
    "EmailTemplate",
    "ScanReport",
    "high_priority_ticket",
]
