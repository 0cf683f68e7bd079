"""
WebSocket Connections
======================

``Connection`` backed by a Starlette WebSocket.

Each connection owns an outbound queue drained by a dedicated writer task,
so rooms can deliver without awaiting the socket and one slow client never
holds up the others. Events reach a client in the order they were queued.
The queue is bounded; a client that falls ``outbox_max_events`` behind is
dropped instead of buffering without limit.
"""

import asyncio
from contextlib import suppress
from typing import Optional
from uuid import uuid4

from starlette.websockets import WebSocket

from helpdesk.config import settings
from helpdesk.core import TransportException
from helpdesk.realtime.domain import Connection, ServerEvent
from helpdesk.shared.infrastructure.logging import get_context_logger


class WebSocketConnection(Connection):
    """One accepted WebSocket plus its writer task."""

    def __init__(
        self,
        websocket: WebSocket,
        connection_id: Optional[str] = None,
        max_queued: Optional[int] = None,
    ):
        self.id = connection_id or uuid4().hex
        self._websocket = websocket
        self._outbox: asyncio.Queue[ServerEvent] = asyncio.Queue(
            maxsize=settings.outbox_max_events if max_queued is None else max_queued
        )
        self._writer: Optional[asyncio.Task] = None
        self._closed = False
        self._log = get_context_logger(__name__, connection_id=self.id)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Events queued but not yet written."""
        return self._outbox.qsize()

    def start(self) -> None:
        """Start the writer task. Must run inside the event loop."""
        if self._writer is None:
            self._writer = asyncio.create_task(self._drain(), name=f"ws-writer-{self.id}")

    def deliver(self, event: ServerEvent) -> None:
        if self._closed:
            raise TransportException("Connection closed", {"connection_id": self.id})
        try:
            self._outbox.put_nowait(event)
        except asyncio.QueueFull:
            self._abandon()
            raise TransportException(
                "Outbound queue full, client dropped",
                {"connection_id": self.id, "max_queued": self._outbox.maxsize}
            )

    async def close(self) -> None:
        """Stop writing. Queued events are discarded."""
        self._closed = True
        self._discard_pending()
        if self._writer is not None:
            self._writer.cancel()
            with suppress(asyncio.CancelledError):
                await self._writer
            self._writer = None

    def _abandon(self) -> None:
        """Stop a client that is not reading; the reader loop still owns cleanup."""
        self._closed = True
        dropped = self._discard_pending()
        if self._writer is not None:
            self._writer.cancel()
        self._log.warning(
            "Outbound queue full, writer stopped",
            extra={"dropped_events": dropped}
        )

    def _discard_pending(self) -> int:
        dropped = 0
        while not self._outbox.empty():
            self._outbox.get_nowait()
            dropped += 1
        return dropped

    async def _drain(self) -> None:
        while True:
            event = await self._outbox.get()
            try:
                await self._websocket.send_json(event.to_dict())
            except Exception as e:
                self._closed = True
                self._log.warning(
                    "WebSocket send failed, writer stopped",
                    extra={"event": event.name, "error": str(e)}
                )
                return
