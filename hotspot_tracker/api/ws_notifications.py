"""WebSocket endpoint pushing scan notifications to connected frontends.

Path: /ws/notifications

Clients only listen.  Anything they send is ignored; the connection is
kept until the client goes away.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from hotspot_tracker.services.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)


def create_notification_router(manager: ConnectionManager) -> APIRouter:
    """Factory that wires the notification socket to a ConnectionManager."""

    router = APIRouter()

    @router.websocket("/ws/notifications")
    async def notifications(websocket: WebSocket) -> None:
        await manager.connect(websocket)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            manager.disconnect(websocket)

    return router
