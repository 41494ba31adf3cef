"""Exceptions raised inside the relay core.

None of these ever reach a client: the router and the dispatcher catch them
at their boundary, log them and carry on.
"""


class RelayError(Exception):
    """Base class for relay errors."""


class ParseError(RelayError, ValueError):
    """Inbound frame is not a JSON object."""


class UnknownSwitch(RelayError, KeyError):
    """Switch name is not one of the fixed switches."""

    def __init__(self, name):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown switch: {self.name!r}"


class InvalidAction(RelayError, ValueError):
    """LED action is neither 'on' nor 'off'."""


class RoleViolation(RelayError):
    """Connection sent a message its role is not allowed to send."""


class DeliveryFailure(RelayError):
    """Outbound message could not be written to its target."""
