"""
Realtime Collaboration Module
=============================

Ticket chat rooms over WebSocket.

Responsibilities:
- Track which connections are viewing which ticket (room registry)
- Validate and fan out chat messages to a ticket's room
- Persist every broadcast message and award staff participation points
- Push ticket status updates to every connected client
"""
