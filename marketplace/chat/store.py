"""
Message store: append-only chat messages with read-flag mutation and counts.

Each call runs in its own short session. Identities come from the database
sequence, so they are strictly increasing and never reused; the poll cursor
depends on that.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import sessionmaker

from marketplace.crud import chat_message_crud
from marketplace.model.chat_message import ChatMessage

logger = logging.getLogger(__name__)


class MessageStore:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def create_message(self, room_id: int, sender_id: int, text: str) -> ChatMessage:
        """Persist an unread message. Callers validate room and sender."""
        with self._session_factory() as db:
            msg = chat_message_crud.create_from_dict(
                db,
                obj_in={
                    "chat_room_id": room_id,
                    "sender_id": sender_id,
                    "message": text,
                    "is_read": False,
                },
            )
        logger.debug("Stored message %s in room %s", msg.id, room_id)
        return msg

    def list_messages(self, room_id: int) -> List[ChatMessage]:
        with self._session_factory() as db:
            return chat_message_crud.list_by_room(db, room_id=room_id)

    def list_messages_after(self, room_id: int, cursor_id: int) -> List[ChatMessage]:
        """Messages newer than cursor_id. 0 means from the beginning."""
        with self._session_factory() as db:
            return chat_message_crud.list_after(db, room_id=room_id, cursor_id=max(cursor_id, 0))

    def last_message(self, room_id: int) -> Optional[ChatMessage]:
        with self._session_factory() as db:
            return chat_message_crud.last_for_room(db, room_id=room_id)

    def count_messages(self, room_id: int) -> int:
        with self._session_factory() as db:
            return chat_message_crud.count_by_room(db, room_id=room_id)

    def mark_read(self, room_id: int, reader_id: int) -> int:
        """Mark everything reader_id received in the room as read. Idempotent; returns rows flipped."""
        with self._session_factory() as db:
            return chat_message_crud.mark_read(db, room_id=room_id, reader_id=reader_id)

    def count_unread_in_room(self, room_id: int, user_id: int) -> int:
        with self._session_factory() as db:
            return chat_message_crud.count_unread_in_room(db, room_id=room_id, user_id=user_id)

    def count_unread(self, user_id: int) -> int:
        with self._session_factory() as db:
            return chat_message_crud.count_unread_for_user(db, user_id=user_id)
