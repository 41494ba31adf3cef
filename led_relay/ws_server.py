"""
WebSocket Server for the ESP32 and the browsers.

Handles:
- FastAPI WebSocket endpoint at / (and /ws)
- Wrapping each accepted socket in a Connection for the relay
- Feeding frames to the relay and running its close handler on teardown
- Health endpoint and static client files
"""

import itertools
import logging
import os
from typing import Optional, Tuple

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.websockets import WebSocketState

from .relay import Relay

logger = logging.getLogger(__name__)


class WebSocketConnection:
    """
    Connection backed by a FastAPI WebSocket.

    Compares by identity, so two wrappers are never the same connection.
    """

    def __init__(self, websocket: WebSocket, conn_id: str):
        self.websocket = websocket
        self.conn_id = conn_id
        self.remote = (
            f"{websocket.client.host}:{websocket.client.port}"
            if websocket.client else "unknown"
        )

    @property
    def is_open(self) -> bool:
        """True while both sides of the socket are connected."""
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send(self, text: str) -> None:
        await self.websocket.send_text(text)

    def __repr__(self) -> str:
        return f"<WebSocketConnection {self.conn_id} {self.remote}>"


class WebSocketServer:
    """
    WebSocket server in front of the relay.

    Features:
    - One endpoint shared by the ESP32 and the browsers; the role comes
      from the registration message, not the URL
    - Static files for the browser UI, when the directory exists
    """

    def __init__(
        self,
        relay: Optional[Relay] = None,
        static_dir: Optional[str] = None,
    ):
        """
        Initialize WebSocket server.

        Args:
            relay: Relay context; a fresh one is created if omitted
            static_dir: Directory of client assets served at /
        """
        self.relay = relay if relay is not None else Relay()
        self.static_dir = static_dir

        self._connection_ids = itertools.count(1)
        self._open_connections = 0

        # FastAPI app
        self.app = FastAPI(title="ESP32 LED Relay")

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._setup_routes()

    def _setup_routes(self):
        """Set up FastAPI routes."""

        @self.app.get("/health")
        async def health_check():
            """Health check endpoint."""
            return {
                "status": "ok",
                "esp32_connected": self.relay.registry.device_online(),
                "observers": self.relay.registry.observer_count,
                "open_connections": self._open_connections,
                "state": self.relay.state.get(),
            }

        @self.app.websocket("/")
        async def websocket_root(websocket: WebSocket):
            await self._handle_websocket(websocket)

        @self.app.websocket("/ws")
        async def websocket_alias(websocket: WebSocket):
            await self._handle_websocket(websocket)

        # Mounted last so the routes above take precedence
        if self.static_dir:
            if os.path.isdir(self.static_dir):
                self.app.mount(
                    "/",
                    StaticFiles(directory=self.static_dir, html=True),
                    name="static",
                )
                logger.info(f"Serving static files from {self.static_dir}")
            else:
                logger.warning(f"Static directory not found: {self.static_dir}")

    async def _handle_websocket(self, websocket: WebSocket) -> None:
        """Handle one WebSocket connection until it closes."""
        await websocket.accept()

        conn = WebSocketConnection(websocket, f"conn_{next(self._connection_ids)}")
        self._open_connections += 1
        logger.info(f"New connection: {conn.conn_id} from {conn.remote}")

        try:
            await self._receive_messages(websocket, conn)
        except WebSocketDisconnect as e:
            logger.debug(f"{conn.conn_id} disconnected (code={e.code})")
        except Exception as e:
            self.relay.on_error(conn, e)
        finally:
            self._open_connections -= 1
            await self.relay.on_close(conn)

    async def _receive_messages(self, websocket: WebSocket, conn: WebSocketConnection) -> None:
        """Feed frames to the relay until the peer disconnects."""
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))

            raw = frame.get("text")
            if raw is None:
                raw = frame.get("bytes")
            if raw is None:
                continue

            await self.relay.on_message(conn, raw)

    def get_stats(self) -> dict:
        """Get server statistics."""
        stats = self.relay.get_stats()
        stats["open_connections"] = self._open_connections
        return stats


def create_app(static_dir: Optional[str] = None) -> Tuple[FastAPI, WebSocketServer]:
    """
    Create FastAPI application with WebSocket server.

    Args:
        static_dir: Directory of client assets served at /

    Returns:
        Tuple of (FastAPI application, WebSocketServer)
    """
    server = WebSocketServer(static_dir=static_dir)
    return server.app, server
