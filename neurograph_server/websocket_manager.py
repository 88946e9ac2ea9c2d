"""
WebSocket Manager - Handles real-time connections and broadcasts.

This module manages WebSocket connections and broadcasts session updates
to all connected canvases.
"""
import asyncio
import json
import logging
from typing import Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class WebSocketManager:
    """
    Manages WebSocket connections and broadcasts.

    All connected clients receive diagram_updated events when
    the session state changes, and refetch GET /api/diagram.
    """

    def __init__(self):
        self._connections: Set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket):
        """Accept and register a new WebSocket connection."""
        await websocket.accept()
        async with self._lock:
            self._connections.add(websocket)
        logger.info("WebSocket connected. Total connections: %d", len(self._connections))

    async def disconnect(self, websocket: WebSocket):
        """Remove a WebSocket connection."""
        async with self._lock:
            self._connections.discard(websocket)
        logger.info("WebSocket disconnected. Total connections: %d", len(self._connections))

    async def broadcast(self, message: dict):
        """
        Broadcast a message to all connected clients.

        Failed sends (disconnected clients) are dropped from the pool.
        """
        if not self._connections:
            return

        # Serialize once for all clients
        message_text = json.dumps(message)

        # Track failed connections for cleanup
        failed: Set[WebSocket] = set()

        async with self._lock:
            for websocket in self._connections:
                try:
                    await websocket.send_text(message_text)
                except Exception as e:
                    logger.debug("Dropping WebSocket after failed send: %s", e)
                    failed.add(websocket)

            # Remove failed connections
            self._connections -= failed

    async def notify_diagram_updated(self):
        """
        Notify all clients that the session has been updated.

        Clients should fetch the latest state via GET /api/diagram.
        """
        await self.broadcast({"type": "diagram_updated"})

    @property
    def connection_count(self) -> int:
        """Get the number of active connections."""
        return len(self._connections)


# Global instance
ws_manager = WebSocketManager()
