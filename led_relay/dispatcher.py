"""
Outbound delivery: unicast to one connection (usually the ESP32) and
broadcast to every browser.

Delivery is best-effort. Sends to connections that are not open are
dropped, sends that fail or stall past the send timeout are logged;
nothing is raised to the caller.
"""

import asyncio
import logging
from typing import Any, Mapping, Optional, Union

from .errors import DeliveryFailure
from .message import Message, encode
from .registry import Connection, ConnectionRegistry

logger = logging.getLogger(__name__)

Payload = Union[Message, Mapping[str, Any]]

# Seconds a single write may take before the target is skipped
SEND_TIMEOUT = 2.0


class Dispatcher:
    """Serializes payloads and writes them to registry connections."""

    def __init__(self, registry: ConnectionRegistry, send_timeout: float = SEND_TIMEOUT):
        self.registry = registry
        self.send_timeout = send_timeout

        # Statistics
        self._sent = 0
        self._dropped = 0
        self._failed = 0

    async def unicast(self, conn: Optional[Connection], payload: Payload) -> bool:
        """
        Send a payload to a single connection.

        Returns:
            True if the message was written, False if it was dropped.
        """
        if conn is None or not conn.is_open:
            self._dropped += 1
            logger.warning(f"Connection not open, message dropped: {encode(payload)}")
            return False
        try:
            await self._send(conn, encode(payload))
        except DeliveryFailure as e:
            logger.warning(str(e))
            return False
        return True

    async def unicast_to_device(self, payload: Payload) -> bool:
        """
        Send a payload to the ESP32.

        Returns:
            True if the message was written, False if the ESP32 is not
            connected or the write failed.
        """
        device = self.registry.device_connection()
        if device is None:
            self._dropped += 1
            logger.warning(f"ESP32 not connected, command dropped: {encode(payload)}")
            return False
        return await self.unicast(device, payload)

    async def broadcast_to_observers(self, payload: Payload) -> int:
        """
        Send a payload to every open browser.

        Closed browsers are skipped but stay registered until their own
        close event removes them.

        Returns:
            Number of browsers the message was written to.
        """
        text = encode(payload)
        delivered = 0
        for conn in self.registry.observers():
            if not conn.is_open:
                continue
            try:
                await self._send(conn, text)
            except DeliveryFailure as e:
                logger.warning(str(e))
                continue
            delivered += 1
        return delivered

    async def _send(self, conn: Connection, text: str) -> None:
        try:
            await asyncio.wait_for(conn.send(text), self.send_timeout)
        except asyncio.TimeoutError:
            self._failed += 1
            raise DeliveryFailure(
                f"Send to {conn.conn_id} timed out after {self.send_timeout}s"
            )
        except Exception as e:
            self._failed += 1
            raise DeliveryFailure(f"Send to {conn.conn_id} failed: {e}") from e
        self._sent += 1

    def get_stats(self) -> dict:
        """Get delivery statistics."""
        return {
            "sent": self._sent,
            "dropped": self._dropped,
            "failed": self._failed,
        }
