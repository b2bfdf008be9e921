"""Manages active WebSocket connections for broadcasting notifications to UI clients."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks frontend WebSocket connections; used as a notification sink."""

    def __init__(self) -> None:
        self._connections: list[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        self._connections.append(websocket)
        await websocket.accept()
        logger.info("Notification client connected (%d total)", len(self._connections))

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._connections:
            self._connections.remove(websocket)
        logger.info("Notification client disconnected (%d remaining)", len(self._connections))

    @property
    def active_count(self) -> int:
        return len(self._connections)

    async def broadcast_json(self, data: dict[str, Any]) -> None:
        """Send a JSON payload to every connected UI client.

        Clients whose socket fails are dropped; the others still receive it.
        """
        for ws in list(self._connections):
            try:
                await ws.send_json(data)
            except (WebSocketDisconnect, RuntimeError, OSError) as exc:
                logger.warning("Dropping notification client: %s", exc)
                self.disconnect(ws)
