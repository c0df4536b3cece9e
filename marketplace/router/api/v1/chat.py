"""
Chat API: rooms, messages and the poll channel (REST).
The push channel lives in marketplace.router.push.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from marketplace.chat.authorization import other_participant
from marketplace.chat.push import PushChannel
from marketplace.chat.service import ChatService
from marketplace.core.database import get_db
from marketplace.core.dependencies import current_user_id, get_chat_service, get_push_channel
from marketplace.crud import block_crud, product_crud, user_crud
from marketplace.schema.chat import (
    MessageCreateBody,
    MessageResponse,
    RoomCreateBody,
    RoomDetail,
    RoomListItem,
    RoomResponse,
    UnreadCountResponse,
)
from marketplace.schema.common import ProductSummary, UserSummary

router = APIRouter()
logger = logging.getLogger(__name__)


def _user_summary(user) -> UserSummary | None:
    return UserSummary.model_validate(user) if user else None


def _product_summary(product) -> ProductSummary | None:
    return ProductSummary.model_validate(product) if product else None


# --- Rooms ---

@router.get("", response_model=List[RoomListItem])
async def list_rooms(
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
    chat: ChatService = Depends(get_chat_service),
):
    """Rooms the current user takes part in, newest first. Rooms with users they blocked are hidden."""
    blocked = block_crud.blocked_ids(db, blocker_id=user_id)
    rooms = [
        room for room in chat.rooms.list_rooms_for_user(user_id)
        if other_participant(room, user_id) not in blocked
    ]
    users = user_crud.get_many(db, [other_participant(r, user_id) for r in rooms])
    products = product_crud.get_many(db, [r.product_id for r in rooms])

    items: List[RoomListItem] = []
    for room in rooms:
        last_msg = chat.store.last_message(room.id)
        items.append(
            RoomListItem(
                id=room.id,
                product_id=room.product_id,
                buyer_id=room.buyer_id,
                seller_id=room.seller_id,
                created_at=room.created_at,
                other_user=_user_summary(users.get(other_participant(room, user_id))),
                product=_product_summary(products.get(room.product_id)),
                last_message=MessageResponse.model_validate(last_msg) if last_msg else None,
                unread_count=chat.store.count_unread_in_room(room.id, user_id),
            )
        )
    return items


@router.get("/unread", response_model=UnreadCountResponse)
async def unread_count(
    user_id: int = Depends(current_user_id),
    chat: ChatService = Depends(get_chat_service),
):
    """Total unread messages for the badge. Never fails; degrades to 0."""
    return UnreadCountResponse(count=chat.get_unread_count(user_id))


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_or_get_room(
    body: RoomCreateBody,
    user_id: int = Depends(current_user_id),
    chat: ChatService = Depends(get_chat_service),
):
    """Open the room between the current user (buyer) and a product's seller."""
    room = chat.open_room(buyer_id=user_id, seller_id=body.seller_id, product_id=body.product_id)
    return RoomResponse.model_validate(room)


@router.get("/{room_id}", response_model=RoomDetail)
async def get_room(
    room_id: int,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
    chat: ChatService = Depends(get_chat_service),
    push: PushChannel = Depends(get_push_channel),
):
    """Room detail with participants, product and block state in both directions."""
    room = chat.require_participant(room_id, user_id)
    other_id = other_participant(room, user_id)
    users = user_crud.get_many(db, [room.buyer_id, room.seller_id])
    return RoomDetail(
        id=room.id,
        product_id=room.product_id,
        buyer_id=room.buyer_id,
        seller_id=room.seller_id,
        created_at=room.created_at,
        buyer=_user_summary(users.get(room.buyer_id)),
        seller=_user_summary(users.get(room.seller_id)),
        other_user=_user_summary(users.get(other_id)),
        product=_product_summary(product_crud.get(db, room.product_id)),
        is_blocked=block_crud.is_blocked(db, blocker_id=user_id, blocked_id=other_id),
        is_blocked_by=block_crud.is_blocked(db, blocker_id=other_id, blocked_id=user_id),
        other_user_online=push.registry.is_online(other_id),
    )


# --- Messages ---

@router.get("/{room_id}/messages", response_model=List[MessageResponse])
async def list_messages(
    room_id: int,
    user_id: int = Depends(current_user_id),
    chat: ChatService = Depends(get_chat_service),
    push: PushChannel = Depends(get_push_channel),
):
    """Full ordered history. Marks the room read for the current user."""
    batch = chat.list_messages(room_id, user_id)
    await push.deliver_read_receipt(batch, user_id)
    return batch.messages


@router.get("/{room_id}/messages/poll", response_model=List[MessageResponse])
async def poll_messages(
    room_id: int,
    last_message_id: int = Query(0, ge=0, alias="lastMessageId"),
    user_id: int = Depends(current_user_id),
    chat: ChatService = Depends(get_chat_service),
    push: PushChannel = Depends(get_push_channel),
):
    """Messages newer than lastMessageId (0 = all). Empty list when nothing is new."""
    batch = chat.poll_messages(room_id, user_id, last_message_id)
    await push.deliver_read_receipt(batch, user_id)
    return batch.messages


@router.post("/{room_id}/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def create_message(
    room_id: int,
    body: MessageCreateBody,
    user_id: int = Depends(current_user_id),
    chat: ChatService = Depends(get_chat_service),
    push: PushChannel = Depends(get_push_channel),
):
    """Send a message. A live recipient is notified over the push channel; polling covers the rest."""
    sent = chat.send_message(room_id, user_id, body.message)
    await push.deliver_new_message(sent)
    return sent.message
