"""
Chat room CRUD.
"""
from typing import List, Optional
from sqlalchemy import desc, or_
from sqlalchemy.orm import Session

from marketplace.model.chat_room import ChatRoom
from marketplace.crud.base import CRUDBase


class CRUDChatRoom(CRUDBase[ChatRoom, dict, dict]):
    def get_by_id(self, db: Session, *, room_id: int) -> Optional[ChatRoom]:
        return db.query(self.model).filter(self.model.id == room_id).first()

    def get_by_triple(
        self, db: Session, *, buyer_id: int, seller_id: int, product_id: int
    ) -> Optional[ChatRoom]:
        return (
            db.query(self.model)
            .filter(
                self.model.buyer_id == buyer_id,
                self.model.seller_id == seller_id,
                self.model.product_id == product_id,
            )
            .first()
        )

    def list_rooms_for_user(self, db: Session, *, user_id: int) -> List[ChatRoom]:
        """Rooms where the user is buyer or seller, newest first."""
        return (
            db.query(self.model)
            .filter(or_(self.model.buyer_id == user_id, self.model.seller_id == user_id))
            .order_by(desc(self.model.created_at), desc(self.model.id))
            .all()
        )


chat_room_crud = CRUDChatRoom(ChatRoom)
