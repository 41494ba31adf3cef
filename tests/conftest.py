"""Shared fixtures: an in-memory connection and a fresh relay."""

import asyncio
import json
import itertools

import pytest
import pytest_asyncio

from led_relay.relay import Relay

_ids = itertools.count(1)


class FakeConnection:
    """In-memory stand-in for a transport connection."""

    def __init__(self, is_open: bool = True, fail_sends: bool = False, hang_sends: bool = False):
        self.conn_id = f"fake_{next(_ids)}"
        self.is_open = is_open
        self.fail_sends = fail_sends
        self.hang_sends = hang_sends
        self.sent = []

    async def send(self, text: str) -> None:
        if self.fail_sends:
            raise RuntimeError("socket torn down")
        if self.hang_sends:
            # Peer stopped reading
            await asyncio.Event().wait()
        self.sent.append(text)

    @property
    def messages(self):
        """Sent frames decoded back to dicts."""
        return [json.loads(t) for t in self.sent]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture
def make_conn():
    """Factory for fake connections."""
    return FakeConnection


@pytest.fixture
def relay():
    return Relay()


@pytest_asyncio.fixture
async def registered(relay):
    """A relay with one registered ESP32 and two registered browsers."""
    device = FakeConnection()
    browser_a = FakeConnection()
    browser_b = FakeConnection()
    await relay.on_message(device, json.dumps({"type": "register", "device": "esp32"}))
    await relay.on_message(browser_a, json.dumps({"type": "register", "device": "browser"}))
    await relay.on_message(browser_b, json.dumps({"type": "register", "device": "browser"}))
    for conn in (device, browser_a, browser_b):
        conn.clear()
    return device, browser_a, browser_b
