#!/usr/bin/env python3
"""
LED Relay - Main Entry Point

This server bridges one ESP32 and any number of browsers:
- Browsers switch the red/blue LEDs, the ESP32 receives the commands
- The ESP32 reports button presses, the browsers receive them
- Everyone sees the same LED state

Environment Variables:
    PORT: Listening port (default: 3000)
    HOST: Bind address (default: 0.0.0.0)
    STATIC_DIR: Directory of browser assets served at / (default: public)
    LOG_LEVEL: Logging level (default: INFO)

Usage:
    export PORT=3000
    python -m led_relay.main
"""

import asyncio
import logging
import os
import signal
import sys
from dataclasses import dataclass

import uvicorn

from .ws_server import WebSocketServer

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_STATIC_DIR = "public"
LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


@dataclass
class RelayConfig:
    """Process configuration read from the environment."""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    static_dir: str = DEFAULT_STATIC_DIR
    log_level: str = "info"

    @classmethod
    def from_env(cls, environ=None) -> 'RelayConfig':
        """
        Load configuration from environment variables.

        Raises:
            ValueError: if PORT is not a valid port number or LOG_LEVEL
                is not a logging level name
        """
        env = os.environ if environ is None else environ
        port = int(env.get("PORT", str(DEFAULT_PORT)))
        if not 0 < port < 65536:
            raise ValueError(f"PORT out of range: {port}")
        log_level = env.get("LOG_LEVEL", "info").lower()
        if log_level not in LOG_LEVELS:
            raise ValueError(f"Unknown LOG_LEVEL: {log_level}")
        return cls(
            host=env.get("HOST", DEFAULT_HOST),
            port=port,
            static_dir=env.get("STATIC_DIR", DEFAULT_STATIC_DIR),
            log_level=log_level,
        )


async def run_server(server: WebSocketServer, config: RelayConfig) -> None:
    """Run the server with uvicorn."""
    uv_config = uvicorn.Config(
        server.app,
        host=config.host,
        port=config.port,
        log_level=config.log_level,
        access_log=True,
    )
    await uvicorn.Server(uv_config).serve()


async def main_async() -> None:
    """Async main entry point."""
    try:
        config = RelayConfig.from_env()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    logging.getLogger().setLevel(config.log_level.upper())

    server = WebSocketServer(static_dir=config.static_dir)

    # Setup signal handlers
    loop = asyncio.get_running_loop()
    shutdown_event = asyncio.Event()

    def signal_handler():
        logger.info("Shutdown signal received")
        shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    logger.info(f"Server started: http://localhost:{config.port}")
    logger.info(f"WebSocket: ws://localhost:{config.port}")

    try:
        server_task = asyncio.create_task(run_server(server, config))
        shutdown_task = asyncio.create_task(shutdown_event.wait())

        done, pending = await asyncio.wait(
            [server_task, shutdown_task],
            return_when=asyncio.FIRST_COMPLETED,
        )

        for task in pending:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    except Exception as e:
        logger.error(f"Server error: {e}")
    finally:
        logger.info(f"Server stopped. Stats: {server.get_stats()}")


def main() -> None:
    """Main entry point."""
    try:
        asyncio.run(main_async())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
