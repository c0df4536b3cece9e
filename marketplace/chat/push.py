"""
Push delivery channel: one WebSocket per authenticated user.

Connection states: unauthenticated -> authenticated (after a valid auth frame)
-> closed. Every frame except auth needs an authenticated connection; errors
are reported as error frames and the connection stays open.
"""
import json
import logging
from typing import Any, Dict, Optional

from fastapi import WebSocket, WebSocketDisconnect

from marketplace.chat import events
from marketplace.chat.authorization import other_participant
from marketplace.chat.connection_manager import ConnectionRegistry
from marketplace.chat.events import AuthFrame, ChatMessageFrame, FrameError, MarkReadFrame
from marketplace.chat.service import ChatService, ReadBatch, SentMessage
from marketplace.core.exceptions import MarketplaceException

logger = logging.getLogger(__name__)


def _frame_text(message: Dict[str, Any]) -> Optional[str]:
    """Text payload of a received frame. Binary frames are decoded as UTF-8; None when undecodable."""
    if message.get("text") is not None:
        return message["text"]
    data = message.get("bytes")
    if data is None:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


class PushConnection:
    """State for one accepted WebSocket."""

    def __init__(self, websocket: WebSocket, session_user_id: Optional[int] = None) -> None:
        self.websocket = websocket
        self.session_user_id = session_user_id
        self.user_id: Optional[int] = None

    @property
    def authenticated(self) -> bool:
        return self.user_id is not None

    async def reply(self, event: Dict[str, Any]) -> None:
        try:
            await self.websocket.send_text(json.dumps(event, default=str))
        except Exception as e:
            logger.debug("Reply to user %s failed: %s", self.user_id, e)


class PushChannel:
    def __init__(
        self,
        chat: ChatService,
        registry: ConnectionRegistry,
        require_session: bool = False,
    ) -> None:
        self.chat = chat
        self.registry = registry
        self.require_session = require_session

    # --- Fan-out used by both channels ---

    async def deliver_new_message(self, sent: SentMessage) -> bool:
        """Best-effort new_message to the recipient. False when they have no live connection."""
        room, msg = sent
        return await self.registry.send(
            other_participant(room, msg.sender_id),
            events.new_message(room.id, msg),
        )

    async def deliver_read_receipt(self, batch: ReadBatch, reader_id: int) -> None:
        if batch.marked_read:
            await self.registry.send(
                other_participant(batch.room, reader_id),
                events.messages_read(batch.room.id, reader_id),
            )

    # --- Connection loop ---

    async def serve(self, websocket: WebSocket, session_user_id: Optional[int] = None) -> None:
        """Handle frames until the client goes away. Caller has accepted the socket."""
        conn = PushConnection(websocket, session_user_id)
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
                raw = _frame_text(message)
                if raw is None:
                    await conn.reply(events.error("Frame must be UTF-8 encoded JSON.", "INVALID_FRAME"))
                    continue
                await self.handle_frame(conn, raw)
        except WebSocketDisconnect as e:
            logger.info("WebSocket closed: user=%s code=%s", conn.user_id, e.code)
        finally:
            if conn.user_id is not None:
                await self.registry.unregister(conn.user_id, websocket)

    async def handle_frame(self, conn: PushConnection, raw: str) -> None:
        try:
            frame = events.parse_frame(raw)
        except FrameError as e:
            await conn.reply(events.error(e.message, e.code))
            return

        if not conn.authenticated and not isinstance(frame, AuthFrame):
            await conn.reply(events.error("Authentication required.", "NOT_AUTHENTICATED"))
            return
        try:
            if isinstance(frame, AuthFrame):
                await self._on_auth(conn, frame)
            elif isinstance(frame, ChatMessageFrame):
                await self._on_chat_message(conn, frame)
            elif isinstance(frame, MarkReadFrame):
                await self._on_mark_read(conn, frame)
        except MarketplaceException as e:
            await conn.reply(events.error(e.message, e.code))
        except Exception as e:
            logger.exception("Failed to handle %s frame: %s", frame.type, e)
            await conn.reply(events.error("Failed to process message. Please try again.", "SERVICE_ERROR"))

    async def _on_auth(self, conn: PushConnection, frame: AuthFrame) -> None:
        if self.require_session or conn.session_user_id is not None:
            if conn.session_user_id != frame.user_id:
                await conn.reply(events.error("Session does not match userId.", "NOT_AUTHENTICATED"))
                return
        if conn.user_id is not None and conn.user_id != frame.user_id:
            await self.registry.unregister(conn.user_id, conn.websocket)
        conn.user_id = frame.user_id
        await self.registry.register(frame.user_id, conn.websocket)
        await conn.reply(events.auth_success(frame.user_id))

    async def _on_chat_message(self, conn: PushConnection, frame: ChatMessageFrame) -> None:
        sent = self.chat.send_message(frame.room_id, conn.user_id, frame.text)
        # The sender gets its echo on this socket even if another one replaced it
        await conn.reply(events.new_message(sent.room.id, sent.message))
        await self.deliver_new_message(sent)

    async def _on_mark_read(self, conn: PushConnection, frame: MarkReadFrame) -> None:
        batch = self.chat.mark_read(frame.room_id, conn.user_id)
        await conn.reply(events.messages_marked_read(batch.room.id))
        await self.deliver_read_receipt(batch, conn.user_id)
