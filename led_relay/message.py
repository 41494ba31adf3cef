"""
Message Schema for relay traffic.

Defines the JSON messages exchanged with the ESP32 and the browsers and
the parsing of inbound frames. Every frame is a JSON object whose "type"
field selects the variant.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from .errors import InvalidAction, ParseError

logger = logging.getLogger(__name__)

# Inbound "device" values for {"type": "register"}
DEVICE_ESP32 = "esp32"
DEVICE_BROWSER = "browser"

LED_ACTIONS = ("on", "off")


def parse_frame(raw: Union[str, bytes]) -> Dict[str, Any]:
    """
    Decode one inbound frame.

    Args:
        raw: Text frame, or binary frame holding UTF-8 text

    Returns:
        The decoded JSON object.

    Raises:
        ParseError: if the frame is not valid UTF-8 JSON or not an object
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"frame is not UTF-8: {e}") from e
    try:
        data = json.loads(raw)
    except (ValueError, TypeError, RecursionError) as e:
        raise ParseError(f"frame is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise ParseError(f"frame is not a JSON object: {type(data).__name__}")
    return data


@dataclass
class LedMessage:
    """
    LED command. Sent by a browser, forwarded as-is to the ESP32.

    Attributes:
        color: Switch name ("red" or "blue")
        action: "on" or "off"
    """
    color: str
    action: str
    type: str = field(default="led", init=False)

    @property
    def value(self) -> bool:
        return self.action == "on"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "color": self.color, "action": self.action}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> 'LedMessage':
        """
        Build from a decoded frame.

        Only the action is checked here; the color is checked against the
        switch store when the command is applied.

        Raises:
            InvalidAction: if action is not "on"/"off"
        """
        action = d.get("action")
        if action not in LED_ACTIONS:
            raise InvalidAction(f"invalid LED action: {action!r}")
        return cls(color=d.get("color"), action=action)


@dataclass
class StateMessage:
    """
    Full switch state.

    esp32_connected is only included in the reply to a browser
    registration.
    """
    switches: Dict[str, bool]
    esp32_connected: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"type": "state"}
        payload.update(self.switches)
        if self.esp32_connected is not None:
            payload["esp32_connected"] = self.esp32_connected
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@dataclass
class Esp32ConnectedMessage:
    """ESP32 presence change, broadcast to the browsers."""
    connected: bool
    type: str = field(default="esp32_connected", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "connected": self.connected}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@dataclass
class ButtonMessage:
    """Physical button press on the ESP32, broadcast to the browsers."""
    action: str = "pressed"
    type: str = field(default="button", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "action": self.action}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


Message = Union[LedMessage, StateMessage, Esp32ConnectedMessage, ButtonMessage]


def encode(payload: Union[Message, Mapping[str, Any]]) -> str:
    """Serialize a message object or a plain mapping to JSON text."""
    if isinstance(payload, Mapping):
        return json.dumps(dict(payload))
    return payload.to_json()
