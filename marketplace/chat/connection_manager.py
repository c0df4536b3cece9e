"""
In-memory registry of live push connections: at most one WebSocket per user id.
"""
import asyncio
import json
import logging
from typing import Any, Dict, Optional

from fastapi import WebSocket
from starlette.websockets import WebSocketState

logger = logging.getLogger(__name__)

CLOSE_REPLACED = 4000
CLOSE_GOING_AWAY = 1001


def _is_writable(websocket: WebSocket) -> bool:
    return (
        websocket.client_state == WebSocketState.CONNECTED
        and websocket.application_state == WebSocketState.CONNECTED
    )


class ConnectionRegistry:
    """Tracks one WebSocket per user and delivers events to it best-effort."""

    def __init__(self) -> None:
        # user_id -> WebSocket
        self._connections: Dict[int, WebSocket] = {}
        self._lock = asyncio.Lock()

    async def register(self, user_id: int, websocket: WebSocket) -> None:
        """Make websocket the user's connection, closing any previous one."""
        async with self._lock:
            previous = self._connections.pop(user_id, None)
            self._connections[user_id] = websocket
        if previous is not None and previous is not websocket:
            logger.info("Replacing push connection for user %s", user_id)
            await self._close_quietly(previous, CLOSE_REPLACED, "Replaced by a newer connection")
        logger.info("Registered push connection for user %s (%d online)", user_id, len(self._connections))

    async def unregister(self, user_id: int, websocket: WebSocket) -> bool:
        """Remove the entry only if it still belongs to websocket."""
        async with self._lock:
            if self._connections.get(user_id) is not websocket:
                return False
            del self._connections[user_id]
        logger.info("Unregistered push connection for user %s", user_id)
        return True

    def lookup(self, user_id: int) -> Optional[WebSocket]:
        return self._connections.get(user_id)

    def is_online(self, user_id: int) -> bool:
        websocket = self.lookup(user_id)
        return websocket is not None and _is_writable(websocket)

    def __len__(self) -> int:
        return len(self._connections)

    async def send(self, user_id: int, event: Dict[str, Any]) -> bool:
        """Push event to the user's connection. False when it could not be delivered; never raises."""
        websocket = self.lookup(user_id)
        if websocket is None:
            logger.debug("No push connection for user %s; poll will catch up", user_id)
            return False
        if not _is_writable(websocket):
            logger.debug("Push connection for user %s not writable", user_id)
            await self.unregister(user_id, websocket)
            return False
        try:
            await websocket.send_text(json.dumps(event, default=str))
        except Exception as e:
            logger.debug("Push send to user %s failed: %s", user_id, e)
            await self.unregister(user_id, websocket)
            return False
        return True

    async def close_all(self) -> None:
        """Close every connection. Used at shutdown."""
        async with self._lock:
            sockets = list(self._connections.values())
            self._connections.clear()
        for websocket in sockets:
            await self._close_quietly(websocket, CLOSE_GOING_AWAY, "Server shutting down")
        if sockets:
            logger.info("Closed %d push connections", len(sockets))

    async def _close_quietly(self, websocket: WebSocket, code: int, reason: str) -> None:
        if not _is_writable(websocket):
            return
        try:
            await websocket.close(code=code, reason=reason)
        except Exception as e:
            logger.debug("Ignoring error while closing websocket: %s", e)
