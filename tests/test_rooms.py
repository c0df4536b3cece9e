"""Test the chat room manager."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from marketplace.chat.rooms import ChatRoomManager
from marketplace.core.database import SessionLocal
from marketplace.model import ChatRoom, Product


class TestChatRoomManager:
    """Test cases for ChatRoomManager."""

    @pytest.fixture(autouse=True)
    def _setup(self, seed):
        self.rooms = ChatRoomManager(SessionLocal)
        self.seed = seed

    def test_get_or_create_returns_same_room(self) -> None:
        """Test that the same triple always maps to one room."""
        # Act
        first = self.rooms.get_or_create_room(self.seed["buyer"], self.seed["seller"], self.seed["product"])
        second = self.rooms.get_or_create_room(self.seed["buyer"], self.seed["seller"], self.seed["product"])

        # Assert
        assert first.id == second.id
        assert first.buyer_id == self.seed["buyer"]
        assert first.seller_id == self.seed["seller"]

    def test_concurrent_get_or_create_yields_one_room(self, db) -> None:
        """Test that racing callers all receive the same single room."""
        # Arrange
        args = (self.seed["buyer"], self.seed["seller"], self.seed["product"])

        # Act
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: self.rooms.get_or_create_room(*args), range(16)))

        # Assert
        assert len({room.id for room in results}) == 1
        assert db.query(ChatRoom).count() == 1

    def test_different_product_gets_different_room(self, db) -> None:
        """Test that a second product between the same users opens a new room."""
        # Arrange
        product = Product(title="Helmet", price=30000, seller_id=self.seed["seller"])
        db.add(product)
        db.commit()

        # Act
        first = self.rooms.get_or_create_room(self.seed["buyer"], self.seed["seller"], self.seed["product"])
        second = self.rooms.get_or_create_room(self.seed["buyer"], self.seed["seller"], product.id)

        # Assert
        assert first.id != second.id

    def test_get_room_missing_is_none(self) -> None:
        """Test that an unknown id returns None."""
        # Assert
        assert self.rooms.get_room(999) is None

    def test_list_rooms_for_user_newest_first(self, db) -> None:
        """Test that rooms are listed for either side, newest first."""
        # Arrange
        product = Product(title="Helmet", price=30000, seller_id=self.seed["seller"])
        db.add(product)
        db.commit()
        older = self.rooms.get_or_create_room(self.seed["buyer"], self.seed["seller"], self.seed["product"])
        newer = self.rooms.get_or_create_room(self.seed["outsider"], self.seed["seller"], product.id)

        # Act
        seller_rooms = self.rooms.list_rooms_for_user(self.seed["seller"])
        buyer_rooms = self.rooms.list_rooms_for_user(self.seed["buyer"])

        # Assert
        assert [r.id for r in seller_rooms] == [newer.id, older.id]
        assert [r.id for r in buyer_rooms] == [older.id]
