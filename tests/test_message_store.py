"""Test the message store and its read-state queries."""

import pytest

from marketplace.chat.store import MessageStore
from marketplace.core.database import SessionLocal
from marketplace.model import ChatRoom


class TestMessageStore:
    """Test cases for MessageStore."""

    @pytest.fixture(autouse=True)
    def _setup(self, seed, room):
        self.store = MessageStore(SessionLocal)
        self.buyer = seed["buyer"]
        self.seller = seed["seller"]
        self.room_id = room.id

    def test_create_message_is_unread_with_increasing_ids(self) -> None:
        """Test that new messages start unread and get strictly increasing ids."""
        # Act
        first = self.store.create_message(self.room_id, self.buyer, "hello")
        second = self.store.create_message(self.room_id, self.seller, "hi")

        # Assert
        assert first.is_read is False
        assert second.id > first.id
        assert first.created_at is not None

    def test_list_messages_ascending(self) -> None:
        """Test that history is returned in ascending id order."""
        # Arrange
        for text in ("one", "two", "three"):
            self.store.create_message(self.room_id, self.buyer, text)

        # Act
        messages = self.store.list_messages(self.room_id)

        # Assert
        assert [m.message for m in messages] == ["one", "two", "three"]
        assert [m.id for m in messages] == sorted(m.id for m in messages)

    def test_list_after_returns_strict_suffix(self) -> None:
        """Test that the cursor returns exactly the messages newer than it."""
        # Arrange
        ids = [self.store.create_message(self.room_id, self.buyer, str(i)).id for i in range(4)]

        # Act
        suffix = self.store.list_messages_after(self.room_id, ids[1])

        # Assert
        assert [m.id for m in suffix] == ids[2:]

    def test_list_after_zero_or_negative_returns_everything(self) -> None:
        """Test that cursor 0 (and below) means from the beginning."""
        # Arrange
        self.store.create_message(self.room_id, self.buyer, "a")
        self.store.create_message(self.room_id, self.seller, "b")

        # Act
        from_zero = self.store.list_messages_after(self.room_id, 0)
        from_negative = self.store.list_messages_after(self.room_id, -5)

        # Assert
        assert len(from_zero) == 2
        assert [m.id for m in from_negative] == [m.id for m in from_zero]

    def test_list_after_latest_is_empty(self) -> None:
        """Test that polling with the newest id yields nothing."""
        # Arrange
        latest = self.store.create_message(self.room_id, self.buyer, "a")

        # Act
        suffix = self.store.list_messages_after(self.room_id, latest.id)

        # Assert
        assert suffix == []

    def test_mark_read_only_flips_incoming_and_is_idempotent(self) -> None:
        """Test that mark_read flips the reader's incoming messages once."""
        # Arrange
        self.store.create_message(self.room_id, self.buyer, "from buyer")
        self.store.create_message(self.room_id, self.seller, "from seller 1")
        self.store.create_message(self.room_id, self.seller, "from seller 2")

        # Act
        first = self.store.mark_read(self.room_id, self.buyer)
        second = self.store.mark_read(self.room_id, self.buyer)

        # Assert
        assert first == 2
        assert second == 0
        by_sender = {m.message: m.is_read for m in self.store.list_messages(self.room_id)}
        assert by_sender == {"from buyer": False, "from seller 1": True, "from seller 2": True}

    def test_count_unread_ignores_own_messages(self) -> None:
        """Test that unread counts only cover messages sent by others."""
        # Arrange
        self.store.create_message(self.room_id, self.buyer, "mine")
        self.store.create_message(self.room_id, self.seller, "theirs")

        # Act
        buyer_unread = self.store.count_unread(self.buyer)
        seller_unread = self.store.count_unread(self.seller)

        # Assert
        assert buyer_unread == 1
        assert seller_unread == 1
        assert self.store.count_unread_in_room(self.room_id, self.buyer) == 1

    def test_count_unread_spans_rooms(self, db, seed) -> None:
        """Test that the unread total sums every room the user is in."""
        # Arrange
        other_room = ChatRoom(buyer_id=seed["outsider"], seller_id=self.seller, product_id=seed["product"])
        db.add(other_room)
        db.commit()
        self.store.create_message(self.room_id, self.buyer, "hi")
        self.store.create_message(other_room.id, seed["outsider"], "is it available?")
        self.store.create_message(other_room.id, seed["outsider"], "hello?")

        # Act
        total = self.store.count_unread(self.seller)

        # Assert
        assert total == 3

    def test_count_unread_for_user_without_rooms_is_zero(self, seed) -> None:
        """Test that a user with no rooms has nothing unread."""
        # Assert
        assert self.store.count_unread(seed["outsider"]) == 0

    def test_last_message_and_count(self) -> None:
        """Test last_message and count_messages on empty and filled rooms."""
        # Assert
        assert self.store.last_message(self.room_id) is None
        assert self.store.count_messages(self.room_id) == 0

        # Arrange
        self.store.create_message(self.room_id, self.buyer, "a")
        last = self.store.create_message(self.room_id, self.seller, "b")

        # Assert
        assert self.store.last_message(self.room_id).id == last.id
        assert self.store.count_messages(self.room_id) == 2
