"""End-to-end tests over the FastAPI WebSocket endpoint."""

import pytest
from fastapi.testclient import TestClient

from led_relay.ws_server import WebSocketServer, create_app


@pytest.fixture
def server():
    return WebSocketServer()


@pytest.fixture
def client(server):
    with TestClient(server.app) as c:
        yield c


def register(ws, device):
    ws.send_json({"type": "register", "device": device})


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["esp32_connected"] is False
    assert body["state"] == {"red": False, "blue": False}


def test_browser_controls_esp32(client, server):
    with client.websocket_connect("/") as browser:
        register(browser, "browser")
        assert browser.receive_json() == {
            "type": "state", "red": False, "blue": False, "esp32_connected": False,
        }

        with client.websocket_connect("/ws") as esp32:
            register(esp32, "esp32")
            assert esp32.receive_json() == {"type": "state", "red": False, "blue": False}
            assert browser.receive_json() == {"type": "esp32_connected", "connected": True}

            browser.send_json({"type": "led", "color": "red", "action": "on"})
            assert esp32.receive_json() == {"type": "led", "color": "red", "action": "on"}
            assert browser.receive_json() == {"type": "state", "red": True, "blue": False}

            esp32.send_json({"type": "button"})
            assert browser.receive_json() == {"type": "button", "action": "pressed"}

        assert browser.receive_json() == {"type": "esp32_connected", "connected": False}

    assert server.relay.state.get() == {"red": True, "blue": False}


def test_malformed_frame_keeps_connection_open(client):
    with client.websocket_connect("/") as browser:
        register(browser, "browser")
        browser.receive_json()

        browser.send_text("definitely not json")
        browser.send_bytes(b"\x00\xff")
        browser.send_json({"type": "led", "color": "blue", "action": "on"})
        assert browser.receive_json() == {"type": "state", "red": False, "blue": True}


def test_static_files_are_served(tmp_path):
    (tmp_path / "index.html").write_text("<h1>LED</h1>")
    app, _ = create_app(static_dir=str(tmp_path))
    with TestClient(app) as client:
        response = client.get("/")
        assert response.status_code == 200
        assert "LED" in response.text
        assert client.get("/health").json()["status"] == "ok"


def test_missing_static_dir_is_tolerated(tmp_path):
    app, server = create_app(static_dir=str(tmp_path / "missing"))
    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
