"""
LED Relay - WebSocket bridge between one ESP32 and many browsers.

This module runs on a public server (VPS) and:
- Accepts WebSocket connections from the ESP32 and from browsers
- Keeps the shared LED state (red/blue) in memory
- Forwards LED commands to the ESP32 and button events to the browsers
"""

__version__ = "1.0.0"
