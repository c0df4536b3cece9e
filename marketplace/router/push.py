"""
Push channel endpoint: WebSocket at /ws carrying auth, chat_message and mark_read frames.
"""
import logging
from typing import Optional

import redis
from fastapi import APIRouter, WebSocket

from marketplace.session import get_session_user_id

router = APIRouter()
logger = logging.getLogger(__name__)


def _session_user_id(token: Optional[str]) -> Optional[int]:
    if not token:
        return None
    try:
        return get_session_user_id(token)
    except (redis.RedisError, RuntimeError) as e:
        logger.error(f"Session lookup failed for websocket: {e}")
        return None


@router.websocket("/ws")
async def websocket_chat(websocket: WebSocket, token: Optional[str] = None):
    """Real-time chat. Send {"type": "auth", "userId": ...} first; ?token= binds the socket to a session."""
    push = websocket.app.state.push_channel
    session_user_id = _session_user_id(token)
    if token and session_user_id is None:
        await websocket.close(code=4001)
        return
    await websocket.accept()
    await push.serve(websocket, session_user_id)
