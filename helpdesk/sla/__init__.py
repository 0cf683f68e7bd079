"""
SLA Monitoring Module
=====================

Periodic breach scan over the ticket store.

Responsibilities:
- Find open tickets whose SLA deadline has passed
- Email the assigned staff member on every scan that still sees the breach
- Isolate failures per ticket so one bad ticket never stops a scan
"""
