"""
Chat schemas: rooms and messages.
"""
from datetime import datetime
from typing import Optional
from pydantic import Field

from marketplace.core.config import settings
from marketplace.schema.common import CamelModel, ProductSummary, UserSummary


# --- Message ---

class MessageCreateBody(CamelModel):
    """Body for POST /chats/{roomId}/messages."""
    message: str = Field(..., max_length=settings.CHAT_MESSAGE_MAX_LENGTH)


class MessageResponse(CamelModel):
    """Single message. Text is already markup-escaped."""
    id: int
    chat_room_id: int
    sender_id: int
    message: str
    is_read: bool
    created_at: Optional[datetime] = None


# --- Room ---

class RoomCreateBody(CamelModel):
    """Body for POST /chats (create or get the room for a product)."""
    product_id: int
    seller_id: int


class RoomResponse(CamelModel):
    id: int
    product_id: int
    buyer_id: int
    seller_id: int
    created_at: Optional[datetime] = None


class RoomListItem(RoomResponse):
    """Room in the caller's list with decoration and unread count."""
    other_user: Optional[UserSummary] = None
    product: Optional[ProductSummary] = None
    last_message: Optional[MessageResponse] = None
    unread_count: int = 0


class RoomDetail(RoomResponse):
    """Room detail with both participants and block state in each direction."""
    buyer: Optional[UserSummary] = None
    seller: Optional[UserSummary] = None
    other_user: Optional[UserSummary] = None
    product: Optional[ProductSummary] = None
    is_blocked: bool = Field(False, description="Caller has blocked the other user.")
    is_blocked_by: bool = Field(False, description="The other user has blocked the caller.")
    other_user_online: bool = Field(False, description="Other user holds a live push connection.")


class UnreadCountResponse(CamelModel):
    count: int = 0
