"""
WebSocket Endpoint
Real-time notification push
"""

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status
import structlog

from taskboard.core.security import subject_from_token
from taskboard.core.websocket import notification_sockets

logger = structlog.get_logger()
router = APIRouter()


@router.websocket("/ws/notifications")
async def notification_websocket(websocket: WebSocket, token: str = Query(None)):
    """
    WebSocket endpoint for a user's notifications.

    The access token is passed as ?token=... since browsers cannot set
    headers on WebSocket handshakes.

    Client messages (JSON):
      {"action": "ping"}

    Server messages (JSON):
      {"type": "notification", "data": {...}}
      {"type": "pong"}
    """
    user_id = subject_from_token(token)
    if user_id is None:
        logger.warning("WebSocket rejected: invalid token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await notification_sockets.connect(websocket, user_id)
    try:
        while True:
            raw = await websocket.receive_text()
            await notification_sockets.handle_client_message(websocket, raw)
    except WebSocketDisconnect:
        await notification_sockets.disconnect(websocket, user_id)
    except Exception as e:
        logger.error("WebSocket error", user_id=user_id, error=str(e))
        await notification_sockets.disconnect(websocket, user_id)
