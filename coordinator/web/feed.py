"""Spectator feed: pushes every new chat message to connected websockets."""

import logging
from typing import Any

from fastapi import WebSocket

from coordinator.chat.models import Message

logger = logging.getLogger(__name__)


class SpectatorFeed:
    """Manages WebSocket connections per debate."""

    def __init__(self):
        self.connections: dict[int, list[WebSocket]] = {}

    def add_connection(self, debate_id: int, websocket: WebSocket) -> None:
        """Add WebSocket connection for a debate."""
        if debate_id not in self.connections:
            self.connections[debate_id] = []
        self.connections[debate_id].append(websocket)

    def remove_connection(self, debate_id: int, websocket: WebSocket) -> None:
        """Remove WebSocket connection."""
        if debate_id in self.connections and websocket in self.connections[debate_id]:
            self.connections[debate_id].remove(websocket)
            if not self.connections[debate_id]:
                del self.connections[debate_id]

    def connection_count(self, debate_id: int | None = None) -> int:
        if debate_id is not None:
            return len(self.connections.get(debate_id, []))
        return sum(len(sockets) for sockets in self.connections.values())

    async def on_message(self, debate_id: int, message: Message) -> None:
        """Chat listener: forward an appended message to the debate's spectators."""
        await self.broadcast(debate_id, {"type": "new_message", "message": message.to_dict()})

    async def broadcast(self, debate_id: int, payload: dict[str, Any]) -> None:
        """Broadcast payload to all connected clients for a debate."""
        if debate_id not in self.connections:
            return

        dead_connections = []
        for websocket in list(self.connections[debate_id]):
            try:
                await websocket.send_json(payload)
            except Exception as e:
                logger.debug(f"WebSocket send failed: {e}")
                dead_connections.append(websocket)

        for conn in dead_connections:
            self.remove_connection(debate_id, conn)
