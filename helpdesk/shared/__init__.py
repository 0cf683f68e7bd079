"""
Shared Kernel Module
====================

Generic infrastructure used by every bounded context (tickets, realtime
chat, SLA monitoring).

DO NOT add business logic from the realtime or SLA modules to the shared kernel.
"""
