"""
Chat message CRUD.
"""
from typing import List, Optional
from sqlalchemy import desc, func, or_, update
from sqlalchemy.orm import Session

from marketplace.model.chat_message import ChatMessage
from marketplace.model.chat_room import ChatRoom
from marketplace.crud.base import CRUDBase


class CRUDChatMessage(CRUDBase[ChatMessage, dict, dict]):
    def list_by_room(self, db: Session, *, room_id: int) -> List[ChatMessage]:
        """All messages in a room, ascending id."""
        return (
            db.query(self.model)
            .filter(self.model.chat_room_id == room_id)
            .order_by(self.model.id)
            .all()
        )

    def list_after(self, db: Session, *, room_id: int, cursor_id: int) -> List[ChatMessage]:
        """Messages in a room with id > cursor_id, ascending id."""
        return (
            db.query(self.model)
            .filter(self.model.chat_room_id == room_id, self.model.id > cursor_id)
            .order_by(self.model.id)
            .all()
        )

    def last_for_room(self, db: Session, *, room_id: int) -> Optional[ChatMessage]:
        return (
            db.query(self.model)
            .filter(self.model.chat_room_id == room_id)
            .order_by(desc(self.model.id))
            .limit(1)
            .first()
        )

    def count_by_room(self, db: Session, *, room_id: int) -> int:
        return (
            db.query(func.count(self.model.id))
            .filter(self.model.chat_room_id == room_id)
            .scalar()
            or 0
        )

    def mark_read(self, db: Session, *, room_id: int, reader_id: int) -> int:
        """Set is_read on every unread message in the room not sent by reader_id. Returns rows flipped."""
        result = db.execute(
            update(self.model)
            .where(
                self.model.chat_room_id == room_id,
                self.model.sender_id != reader_id,
                self.model.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        db.commit()
        return result.rowcount or 0

    def count_unread_in_room(self, db: Session, *, room_id: int, user_id: int) -> int:
        return (
            db.query(func.count(self.model.id))
            .filter(
                self.model.chat_room_id == room_id,
                self.model.sender_id != user_id,
                self.model.is_read.is_(False),
            )
            .scalar()
            or 0
        )

    def count_unread_for_user(self, db: Session, *, user_id: int) -> int:
        """Unread messages addressed to user_id across every room they take part in."""
        return (
            db.query(func.count(self.model.id))
            .join(ChatRoom, ChatRoom.id == self.model.chat_room_id)
            .filter(
                or_(ChatRoom.buyer_id == user_id, ChatRoom.seller_id == user_id),
                self.model.sender_id != user_id,
                self.model.is_read.is_(False),
            )
            .scalar()
            or 0
        )


chat_message_crud = CRUDChatMessage(ChatMessage)
