"""
Real-time WebSocket endpoint. Relays client events to everyone else.
"""

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from teamforge.schemas.realtime import RealtimeMessage
from teamforge.services.realtime import PING, PONG, make_message, manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/api/ws")
async def websocket_endpoint(websocket: WebSocket):
    await manager.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = RealtimeMessage.model_validate(json.loads(raw))
            except (json.JSONDecodeError, ValidationError) as e:
                logger.warning(f"Ignoring malformed WebSocket message: {e}")
                continue

            if message.type == PING:
                await manager.send(websocket, make_message(PONG))
                continue

            logger.debug(f"Relaying WebSocket message {message.type}")
            await manager.broadcast(message.model_dump(by_alias=True, exclude_none=True), exclude=websocket)
    except WebSocketDisconnect:
        manager.disconnect(websocket)
