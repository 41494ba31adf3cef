"""
Shared LED state.

Holds the on/off value of a fixed set of named switches. Lives in memory
only; every switch starts off and is reset on restart.
"""

import logging
from typing import Dict, Iterable, Tuple

from .errors import UnknownSwitch

logger = logging.getLogger(__name__)

SWITCH_NAMES: Tuple[str, ...] = ("red", "blue")


class SwitchState:
    """
    In-memory store for the switch values.

    The set of names is fixed at construction; ``set`` refuses anything
    else with ``UnknownSwitch``.
    """

    def __init__(self, names: Iterable[str] = SWITCH_NAMES):
        self._names: Tuple[str, ...] = tuple(names)
        self._values: Dict[str, bool] = {name: False for name in self._names}

    @property
    def names(self) -> Tuple[str, ...]:
        """Switch names in declaration order."""
        return self._names

    def __contains__(self, name) -> bool:
        return name in self._values

    def get(self) -> Dict[str, bool]:
        """Return a copy of the current values."""
        return dict(self._values)

    def set(self, name: str, value: bool) -> bool:
        """
        Set a switch.

        Args:
            name: Switch name
            value: New on/off value

        Returns:
            The previous value of the switch.

        Raises:
            UnknownSwitch: if name is not one of the fixed switches
        """
        if not isinstance(name, str) or name not in self._values:
            raise UnknownSwitch(name)
        previous = self._values[name]
        self._values[name] = bool(value)
        return previous

    def reset(self) -> None:
        """Turn every switch off."""
        for name in self._names:
            self._values[name] = False
