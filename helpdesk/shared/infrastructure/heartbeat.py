"""
Uptime Heartbeat
================

Pings an external uptime monitor so it can alert when the service stops
reporting. Failures are logged and never raised; the next tick tries again.
"""

from typing import Optional

import httpx

from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class HeartbeatClient:
    """GETs ``url`` once per call to ``beat``."""

    def __init__(self, url: str, timeout_seconds: float = 5.0):
        self.url = url
        self._timeout = timeout_seconds
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def beat(self) -> bool:
        """Send one heartbeat. Returns True on a 2xx answer."""
        try:
            client = await self._get_client()
            response = await client.get(self.url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Failed to send heartbeat", extra={"error": str(e)})
            return False

        logger.debug("Heartbeat sent", extra={"status_code": response.status_code})
        return True

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
