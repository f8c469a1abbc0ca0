"""
WebSocket Manager
Tracks each user's open WebSocket connections and pushes notifications to them
"""

import asyncio
import json
from typing import Dict, Set, Any
from fastapi import WebSocket
import structlog

logger = structlog.get_logger()


class NotificationSocketManager:
    """Manages per-user WebSocket connections"""

    def __init__(self):
        # user_id -> open sockets (one user may have several tabs)
        self._connections: Dict[str, Set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, user_id: str):
        """Accept and register a WebSocket connection for a user"""
        await websocket.accept()
        async with self._lock:
            self._connections.setdefault(user_id, set()).add(websocket)
        logger.debug("WebSocket connected", user_id=user_id, total=self.connection_count())

    async def disconnect(self, websocket: WebSocket, user_id: str):
        """Remove a WebSocket connection"""
        async with self._lock:
            sockets = self._connections.get(user_id)
            if sockets is not None:
                sockets.discard(websocket)
                if not sockets:
                    del self._connections[user_id]
        logger.debug("WebSocket disconnected", user_id=user_id, total=self.connection_count())

    def connection_count(self, user_id: str = None) -> int:
        if user_id is not None:
            return len(self._connections.get(user_id, ()))
        return sum(len(sockets) for sockets in self._connections.values())

    async def send_to_user(self, user_id: str, data: Dict[str, Any]) -> int:
        """
        Push a notification to every open socket of a user.

        Returns the number of sockets the message reached. Sockets that fail
        to send are dropped.
        """
        message = json.dumps({"type": "notification", "data": data})

        async with self._lock:
            targets = set(self._connections.get(user_id, ()))

        delivered = 0
        disconnected = []
        for ws in targets:
            try:
                await ws.send_text(message)
                delivered += 1
            except Exception as e:
                logger.debug("WebSocket send failed", user_id=user_id, error=str(e))
                disconnected.append(ws)

        for ws in disconnected:
            await self.disconnect(ws, user_id)

        return delivered

    async def handle_client_message(self, websocket: WebSocket, raw: str):
        """Handle incoming messages from a WebSocket client"""
        try:
            msg = json.loads(raw)
        except json.JSONDecodeError:
            await websocket.send_text(json.dumps({
                "type": "error",
                "message": "Invalid JSON",
            }))
            return

        action = msg.get("action") if isinstance(msg, dict) else None
        if action == "ping":
            await websocket.send_text(json.dumps({"type": "pong"}))
        else:
            await websocket.send_text(json.dumps({
                "type": "error",
                "message": f"Unknown action: {action}",
            }))


# Singleton instance
notification_sockets = NotificationSocketManager()
