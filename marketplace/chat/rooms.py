"""
Chat room manager: lookup-or-create keyed by (buyer, seller, product).
"""
import logging
import threading
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from marketplace.crud import chat_room_crud
from marketplace.model.chat_room import ChatRoom

logger = logging.getLogger(__name__)


class ChatRoomManager:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        # Serializes check-then-insert within this process; the unique
        # constraint covers other processes.
        self._create_lock = threading.Lock()

    def get_or_create_room(self, buyer_id: int, seller_id: int, product_id: int) -> ChatRoom:
        with self._create_lock, self._session_factory() as db:
            room = chat_room_crud.get_by_triple(
                db, buyer_id=buyer_id, seller_id=seller_id, product_id=product_id
            )
            if room:
                return room
            try:
                room = chat_room_crud.create_from_dict(
                    db,
                    obj_in={"buyer_id": buyer_id, "seller_id": seller_id, "product_id": product_id},
                )
            except IntegrityError:
                db.rollback()
                room = chat_room_crud.get_by_triple(
                    db, buyer_id=buyer_id, seller_id=seller_id, product_id=product_id
                )
                if room is None:
                    raise
                logger.info("Room %s created concurrently; reusing it", room.id)
                return room
            logger.info(
                "Created chat room %s (buyer=%s seller=%s product=%s)",
                room.id, buyer_id, seller_id, product_id,
            )
            return room

    def get_room(self, room_id: int) -> Optional[ChatRoom]:
        with self._session_factory() as db:
            return chat_room_crud.get_by_id(db, room_id=room_id)

    def list_rooms_for_user(self, user_id: int) -> List[ChatRoom]:
        """Rooms where the user is buyer or seller, newest first."""
        with self._session_factory() as db:
            return chat_room_crud.list_rooms_for_user(db, user_id=user_id)
