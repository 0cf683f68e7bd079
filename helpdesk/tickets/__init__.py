"""
Tickets Module
==============

Ticket, message and user persistence used by the realtime chat and the
SLA monitor, plus the collaborator endpoints that change ticket status.
"""
