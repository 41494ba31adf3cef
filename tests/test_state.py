"""Tests for the in-memory switch store."""

import pytest

from led_relay.errors import UnknownSwitch
from led_relay.state import SwitchState


def test_all_switches_start_off():
    assert SwitchState().get() == {"red": False, "blue": False}


def test_set_returns_previous_value():
    state = SwitchState()
    assert state.set("red", True) is False
    assert state.set("red", False) is True
    assert state.get()["red"] is False


def test_unknown_switch_is_rejected_without_mutation():
    state = SwitchState()
    with pytest.raises(UnknownSwitch):
        state.set("green", True)
    assert state.get() == {"red": False, "blue": False}


def test_unhashable_name_is_unknown():
    with pytest.raises(UnknownSwitch):
        SwitchState().set(["red"], True)


def test_get_returns_a_copy():
    state = SwitchState()
    snapshot = state.get()
    snapshot["red"] = True
    assert state.get()["red"] is False


def test_reset_turns_everything_off():
    state = SwitchState()
    state.set("red", True)
    state.set("blue", True)
    state.reset()
    assert state.get() == {"red": False, "blue": False}


def test_custom_names():
    state = SwitchState(("a", "b", "c"))
    assert state.names == ("a", "b", "c")
    assert "b" in state
    assert "red" not in state
