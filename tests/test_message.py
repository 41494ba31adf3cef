"""Tests for frame parsing and message serialization."""

import json

import pytest

from led_relay.errors import InvalidAction, ParseError
from led_relay.message import (
    ButtonMessage,
    Esp32ConnectedMessage,
    LedMessage,
    StateMessage,
    encode,
    parse_frame,
)


@pytest.mark.parametrize("raw", ["not json", "", "{", "[1, 2]", "42", "null", b"\xff\xfe"])
def test_parse_frame_rejects_non_objects(raw):
    with pytest.raises(ParseError):
        parse_frame(raw)


def test_parse_frame_accepts_bytes():
    assert parse_frame(b'{"type": "button"}') == {"type": "button"}


def test_led_from_dict():
    led = LedMessage.from_dict({"type": "led", "color": "blue", "action": "on"})
    assert led.color == "blue"
    assert led.value is True
    assert json.loads(led.to_json()) == {"type": "led", "color": "blue", "action": "on"}


@pytest.mark.parametrize("action", ["ON", "toggle", None, 1])
def test_led_rejects_bad_action(action):
    with pytest.raises(InvalidAction):
        LedMessage.from_dict({"type": "led", "color": "red", "action": action})


def test_state_message_omits_presence_unless_given():
    plain = StateMessage({"red": True, "blue": False}).to_dict()
    assert plain == {"type": "state", "red": True, "blue": False}

    reply = StateMessage({"red": False, "blue": False}, esp32_connected=False).to_dict()
    assert reply == {"type": "state", "red": False, "blue": False, "esp32_connected": False}


def test_event_messages():
    assert Esp32ConnectedMessage(True).to_dict() == {"type": "esp32_connected", "connected": True}
    assert ButtonMessage().to_dict() == {"type": "button", "action": "pressed"}


def test_encode_accepts_mappings_and_messages():
    assert json.loads(encode({"type": "x"})) == {"type": "x"}
    assert json.loads(encode(ButtonMessage())) == {"type": "button", "action": "pressed"}


def test_parse_frame_rejects_oversized_integer():
    with pytest.raises(ParseError):
        parse_frame("9" * 5000)


def test_parse_frame_rejects_deep_nesting():
    with pytest.raises(ParseError):
        parse_frame("[" * 100000 + "]" * 100000)
