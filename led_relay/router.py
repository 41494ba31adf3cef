"""
Inbound message routing.

Handles:
- Registration handshake (ESP32 or browser)
- LED commands from browsers
- Button events from the ESP32

Bad frames, wrong roles and unknown message types are dropped without
any reply; the connection stays open.
"""

import logging
from typing import Any, Dict, Union

from .dispatcher import Dispatcher
from .errors import InvalidAction, ParseError, RoleViolation, UnknownSwitch
from .message import (
    DEVICE_BROWSER,
    DEVICE_ESP32,
    ButtonMessage,
    Esp32ConnectedMessage,
    LedMessage,
    StateMessage,
    parse_frame,
)
from .registry import Connection, ConnectionRegistry, Role
from .state import SwitchState

logger = logging.getLogger(__name__)


class MessageRouter:
    """
    Dispatches decoded frames to the registration, LED and button handlers.

    Rules are checked in order and the first match wins. The router does
    no locking of its own; callers serialize calls to ``handle``.
    """

    def __init__(
        self,
        state: SwitchState,
        registry: ConnectionRegistry,
        dispatcher: Dispatcher,
    ):
        self.state = state
        self.registry = registry
        self.dispatcher = dispatcher

        # Statistics
        self._total_messages = 0
        self._handled_messages = 0
        self._invalid_messages = 0
        self._ignored_messages = 0

    async def handle(self, conn: Connection, raw: Union[str, bytes]) -> bool:
        """
        Handle one inbound frame from conn.

        Returns:
            True if the frame matched a rule and was acted on, False if it
            was dropped or ignored.
        """
        self._total_messages += 1
        try:
            msg = parse_frame(raw)
            handled = await self._dispatch(conn, msg)
        except (ParseError, UnknownSwitch, InvalidAction) as e:
            self._invalid_messages += 1
            logger.debug(f"Invalid message from {conn.conn_id}: {e}")
            return False
        except RoleViolation as e:
            self._ignored_messages += 1
            logger.debug(f"Ignoring message from {conn.conn_id}: {e}")
            return False

        if handled:
            self._handled_messages += 1
        else:
            self._ignored_messages += 1
            logger.debug(f"Ignoring message from {conn.conn_id}: {msg}")
        return handled

    async def _dispatch(self, conn: Connection, msg: Dict[str, Any]) -> bool:
        msg_type = msg.get("type")

        if msg_type == "register":
            device = msg.get("device")
            if device == DEVICE_ESP32:
                await self._register_device(conn)
                return True
            if device == DEVICE_BROWSER:
                await self._register_observer(conn)
                return True
            return False

        if msg_type == "led":
            if not self.registry.is_observer(conn):
                raise RoleViolation(f"led from {self.registry.role_of(conn).value} connection")
            await self._set_led(LedMessage.from_dict(msg))
            return True

        if msg_type == "button":
            if not self.registry.is_device(conn):
                raise RoleViolation(f"button from {self.registry.role_of(conn).value} connection")
            logger.info("Button pressed on ESP32")
            await self.dispatcher.broadcast_to_observers(ButtonMessage())
            return True

        return False

    def _check_role_change(self, conn: Connection, wanted: Role) -> None:
        # A role is set once; this takes precedence over last-device-wins
        current = self.registry.role_of(conn)
        if current is not Role.UNASSIGNED and current is not wanted:
            raise RoleViolation(
                f"{conn.conn_id} is already registered as {current.value}"
            )

    async def _register_device(self, conn: Connection) -> None:
        self._check_role_change(conn, Role.DEVICE)
        previous = self.registry.register_device(conn)
        if previous is not None:
            logger.warning(f"ESP32 {conn.conn_id} replaces {previous.conn_id}")
        logger.info(f"ESP32 registered: {conn.conn_id}")

        await self.dispatcher.unicast(conn, StateMessage(self.state.get()))
        await self.dispatcher.broadcast_to_observers(Esp32ConnectedMessage(True))

    async def _register_observer(self, conn: Connection) -> None:
        self._check_role_change(conn, Role.OBSERVER)
        self.registry.register_observer(conn)
        logger.info(
            f"Browser registered: {conn.conn_id}. Total: {self.registry.observer_count}"
        )

        await self.dispatcher.unicast(
            conn,
            StateMessage(
                self.state.get(),
                esp32_connected=self.registry.device_online(),
            ),
        )

    async def _set_led(self, led: LedMessage) -> None:
        # set() rejects unknown colors before anything is sent
        self.state.set(led.color, led.value)
        logger.info(f"LED {led.color}: {led.action.upper()}")

        await self.dispatcher.unicast_to_device(led)
        await self.dispatcher.broadcast_to_observers(StateMessage(self.state.get()))

    def get_stats(self) -> dict:
        """Get routing statistics."""
        return {
            "total_messages": self._total_messages,
            "handled_messages": self._handled_messages,
            "invalid_messages": self._invalid_messages,
            "ignored_messages": self._ignored_messages,
        }
