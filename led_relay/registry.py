"""
Connection registry.

Tracks which connection is the ESP32 (at most one) and which connections
are browsers. Roles are kept in a side-table keyed by connection identity;
the transport objects themselves are never modified.
"""

import enum
import logging
from typing import Dict, List, Optional, Protocol, Set

logger = logging.getLogger(__name__)


class Role(enum.Enum):
    """Role a connection takes after registering."""
    UNASSIGNED = "unassigned"
    DEVICE = "device"
    OBSERVER = "observer"


class Connection(Protocol):
    """What the relay needs from a transport connection."""
    conn_id: str

    @property
    def is_open(self) -> bool: ...

    async def send(self, text: str) -> None: ...


class ConnectionRegistry:
    """
    Device slot plus observer set.

    Holds non-owning references: connections are created and closed by
    the transport layer, the registry only tracks membership.
    """

    def __init__(self):
        self._device: Optional[Connection] = None
        self._observers: Set[Connection] = set()
        self._roles: Dict[Connection, Role] = {}
        self._device_registrations = 0

    def register_device(self, conn: Connection) -> Optional[Connection]:
        """
        Make conn the device. Last registration wins.

        The previous device, if any, is not closed; it keeps its role and
        cleans up on its own close.

        Returns:
            The connection that held the slot before, or None.
        """
        previous = self._device
        self._device = conn
        self._roles[conn] = Role.DEVICE
        self._device_registrations += 1
        return previous if previous is not conn else None

    def register_observer(self, conn: Connection) -> None:
        """Add conn to the observer set."""
        self._observers.add(conn)
        self._roles[conn] = Role.OBSERVER

    def role_of(self, conn: Connection) -> Role:
        return self._roles.get(conn, Role.UNASSIGNED)

    def is_device(self, conn: Connection) -> bool:
        return self.role_of(conn) is Role.DEVICE

    def is_observer(self, conn: Connection) -> bool:
        return self.role_of(conn) is Role.OBSERVER

    def is_current_device(self, conn: Connection) -> bool:
        """True if conn occupies the device slot right now."""
        return self._device is conn

    def device_connection(self) -> Optional[Connection]:
        """Current device, or None if absent or no longer open."""
        if self._device is None or not self._device.is_open:
            return None
        return self._device

    def device_online(self) -> bool:
        return self.device_connection() is not None

    def observers(self) -> List[Connection]:
        """Snapshot of the observer set, safe to iterate across awaits."""
        return list(self._observers)

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def remove_on_close(self, conn: Connection) -> Role:
        """
        Forget a closed connection.

        Returns:
            The role conn held; UNASSIGNED if it never registered.
        """
        if self._device is conn:
            self._device = None
        self._observers.discard(conn)
        return self._roles.pop(conn, Role.UNASSIGNED)

    def get_stats(self) -> dict:
        """Get registry statistics."""
        return {
            "device_id": self._device.conn_id if self._device else None,
            "device_online": self.device_online(),
            "observers": len(self._observers),
            "device_registrations": self._device_registrations,
        }
