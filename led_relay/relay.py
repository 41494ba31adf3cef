"""
Relay context and connection lifecycle.

The Relay owns the switch state, the registry, the dispatcher and the
router, and is handed to the transport layer explicitly. Every message
and every close runs under one asyncio lock, so reading the state,
changing it and fanning out the result never interleaves with another
handler.
"""

import asyncio
import logging
from typing import Iterable, Optional, Union

from .dispatcher import SEND_TIMEOUT, Dispatcher
from .message import Esp32ConnectedMessage
from .registry import Connection, ConnectionRegistry, Role
from .router import MessageRouter
from .state import SWITCH_NAMES, SwitchState

logger = logging.getLogger(__name__)


class Relay:
    """
    Process-wide relay context.

    Architecture:
        ESP32 <-> WebSocket <-> Relay <-> WebSocket <-> Browsers
    """

    def __init__(
        self,
        switch_names: Iterable[str] = SWITCH_NAMES,
        send_timeout: float = SEND_TIMEOUT,
    ):
        self.state = SwitchState(switch_names)
        self.registry = ConnectionRegistry()
        self.dispatcher = Dispatcher(self.registry, send_timeout=send_timeout)
        self.router = MessageRouter(self.state, self.registry, self.dispatcher)

        self._lock = asyncio.Lock()
        self._closed_connections = 0
        self._transport_errors = 0

    async def on_message(self, conn: Connection, raw: Union[str, bytes]) -> bool:
        """Route one inbound frame."""
        async with self._lock:
            return await self.router.handle(conn, raw)

    async def on_close(self, conn: Connection) -> None:
        """
        Forget a closed connection and tell the browsers if the ESP32 left.

        Never raises: this runs during connection teardown.
        """
        try:
            async with self._lock:
                was_current_device = self.registry.is_current_device(conn)
                role = self.registry.remove_on_close(conn)
                self._closed_connections += 1

                if role is Role.DEVICE:
                    if was_current_device:
                        logger.info(f"ESP32 disconnected: {conn.conn_id}")
                        await self.dispatcher.broadcast_to_observers(
                            Esp32ConnectedMessage(False)
                        )
                    else:
                        # Replaced earlier by a newer registration
                        logger.info(f"Orphaned ESP32 closed: {conn.conn_id}")
                elif role is Role.OBSERVER:
                    logger.info(
                        f"Browser disconnected: {conn.conn_id}. "
                        f"Remaining: {self.registry.observer_count}"
                    )
                else:
                    logger.debug(f"Unregistered connection closed: {conn.conn_id}")
        except Exception as e:
            logger.error(f"Error while closing {conn.conn_id}: {e}")

    def on_error(self, conn: Connection, exc: Optional[BaseException]) -> None:
        """Log a transport error. The close path still runs afterwards."""
        self._transport_errors += 1
        logger.warning(f"WS error on {conn.conn_id}: {exc}")

    def get_stats(self) -> dict:
        """Get relay statistics."""
        return {
            "state": self.state.get(),
            "registry": self.registry.get_stats(),
            "router": self.router.get_stats(),
            "dispatcher": self.dispatcher.get_stats(),
            "closed_connections": self._closed_connections,
            "transport_errors": self._transport_errors,
        }
