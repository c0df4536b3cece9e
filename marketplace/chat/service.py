"""
Chat service: the single send path and the read paths shared by the REST
(poll) channel and the WebSocket (push) channel.

Authorization and validation happen here, before anything reaches the store.
Push fan-out is not done here; callers hand the result to PushChannel.
"""
import html
import logging
from typing import List, NamedTuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from marketplace.chat.authorization import Denial, can_send, is_participant
from marketplace.chat.rooms import ChatRoomManager
from marketplace.chat.store import MessageStore
from marketplace.core.exceptions import BlockedByRecipient, Forbidden, NotFound, ValidationFailed
from marketplace.crud import block_crud
from marketplace.model.chat_message import ChatMessage
from marketplace.model.chat_room import ChatRoom

logger = logging.getLogger(__name__)


class SentMessage(NamedTuple):
    room: ChatRoom
    message: ChatMessage


class ReadBatch(NamedTuple):
    room: ChatRoom
    messages: List[ChatMessage]
    marked_read: int


def sanitize_text(text: str) -> str:
    """Trim and escape markup metacharacters (& < > " ')."""
    return html.escape(text.strip(), quote=True)


class ChatService:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self.store = MessageStore(session_factory)
        self.rooms = ChatRoomManager(session_factory)

    # --- Rooms ---

    def open_room(self, buyer_id: int, seller_id: int, product_id: int) -> ChatRoom:
        """Existing room for the triple, or a new one."""
        if buyer_id == seller_id:
            raise ValidationFailed("You cannot start a chat with yourself.", code="INVALID_SELLER")
        try:
            return self.rooms.get_or_create_room(buyer_id, seller_id, product_id)
        except IntegrityError:
            logger.warning(
                "Room creation rejected (buyer=%s seller=%s product=%s)", buyer_id, seller_id, product_id
            )
            raise ValidationFailed("Unknown product or seller.", code="INVALID_ROOM")

    def require_room(self, room_id: int) -> ChatRoom:
        room = self.rooms.get_room(room_id)
        if room is None:
            raise NotFound("Chat room")
        return room

    def require_participant(self, room_id: int, user_id: int) -> ChatRoom:
        room = self.require_room(room_id)
        if not is_participant(room, user_id):
            logger.info("User %s denied access to room %s", user_id, room_id)
            raise Forbidden()
        return room

    def is_blocked(self, blocker_id: int, blocked_id: int) -> bool:
        with self._session_factory() as db:
            return block_crud.is_blocked(db, blocker_id=blocker_id, blocked_id=blocked_id)

    # --- Messages ---

    def send_message(self, room_id: int, sender_id: int, text: str) -> SentMessage:
        if text is None or not text.strip():
            raise ValidationFailed("Message text is required.", code="EMPTY_MESSAGE")
        room = self.require_room(room_id)
        denial = can_send(room, sender_id, self.is_blocked)
        if denial is Denial.NOT_PARTICIPANT:
            logger.info("User %s denied send to room %s: not a participant", sender_id, room_id)
            raise Forbidden("You cannot send messages in this chat room.")
        if denial is Denial.BLOCKED_BY_RECIPIENT:
            logger.info("User %s denied send to room %s: blocked by recipient", sender_id, room_id)
            raise BlockedByRecipient()
        msg = self.store.create_message(room.id, sender_id, sanitize_text(text))
        return SentMessage(room=room, message=msg)

    def list_messages(self, room_id: int, reader_id: int) -> ReadBatch:
        """Full history; viewing it marks the reader's incoming messages read."""
        room = self.require_participant(room_id, reader_id)
        messages = self.store.list_messages(room.id)
        marked = self.store.mark_read(room.id, reader_id)
        return ReadBatch(room=room, messages=messages, marked_read=marked)

    def poll_messages(self, room_id: int, reader_id: int, last_message_id: int = 0) -> ReadBatch:
        """
        Messages newer than last_message_id.

        When the suffix holds anything from the other participant, the whole
        room is marked read for the reader, not just the returned suffix.
        """
        room = self.require_participant(room_id, reader_id)
        messages = self.store.list_messages_after(room.id, last_message_id)
        marked = 0
        if any(m.sender_id != reader_id for m in messages):
            marked = self.store.mark_read(room.id, reader_id)
        return ReadBatch(room=room, messages=messages, marked_read=marked)

    def mark_read(self, room_id: int, reader_id: int) -> ReadBatch:
        room = self.require_participant(room_id, reader_id)
        marked = self.store.mark_read(room.id, reader_id)
        return ReadBatch(room=room, messages=[], marked_read=marked)

    # --- Unread ---

    def get_unread_count(self, user_id: int) -> int:
        """Total unread for badges. Failures degrade to 0 instead of erroring the page."""
        try:
            return self.store.count_unread(user_id)
        except Exception:
            logger.exception("Unread count failed for user %s", user_id)
            return 0
