"""
Real-time event relay over WebSockets.

Delivery is best effort: each connected client gets a message at most once,
with no acknowledgement, retry or cross-client ordering. Callers broadcast
only after their changes are committed, so a lost message never leaves the
store inconsistent.
"""

import logging
import time
from typing import Any, List, Optional

from fastapi import WebSocket

logger = logging.getLogger(__name__)

# ── Event types ──
ATTEMPT_UPDATED = "attempt_updated"
TEAM_MEMBER_JOINED = "team_member_joined"
CHALLENGE_COMPLETED = "challenge_completed"
LEADERBOARD_UPDATE = "leaderboard_update"
PING = "ping"
PONG = "pong"


def make_message(event_type: str, data: Any = None, user_id: Optional[int] = None) -> dict:
    """Build the ``{type, data, timestamp, userId}`` payload clients expect."""
    message = {
        "type": event_type,
        "data": data if data is not None else {},
        "timestamp": int(time.time() * 1000),
    }
    if user_id is not None:
        message["userId"] = user_id
    return message


class ConnectionManager:
    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"WebSocket connected ({len(self.active_connections)} open)")

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            logger.info(f"WebSocket closed ({len(self.active_connections)} open)")

    async def send(self, websocket: WebSocket, message: dict) -> bool:
        try:
            await websocket.send_json(message)
        except Exception as e:
            logger.warning(f"Dropping WebSocket after failed send: {e}")
            self.disconnect(websocket)
            return False
        return True

    async def broadcast(self, message: dict, exclude: Optional[WebSocket] = None) -> int:
        """Send ``message`` to every client except ``exclude``. Returns deliveries."""
        delivered = 0
        for connection in list(self.active_connections):
            if connection is exclude:
                continue
            if await self.send(connection, message):
                delivered += 1
        return delivered

    async def publish(self, event_type: str, data: Any = None, user_id: Optional[int] = None) -> int:
        return await self.broadcast(make_message(event_type, data, user_id))


manager = ConnectionManager()
