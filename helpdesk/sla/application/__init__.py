"""
SLA Application Layer
=====================

The breach monitor and the notifier interface it depends on.
"""

from helpdesk.sla.application.services import INotifier, SLAMonitor

__all__ = ["INotifier", "SLAMonitor"]
