"""
Authorization gate for chat rooms. Pure decisions, no side effects.
"""
import enum
from typing import Callable, Optional

from marketplace.model.chat_room import ChatRoom

# is_blocked(blocker_id, blocked_id) -> bool
BlockLookup = Callable[[int, int], bool]


class Denial(enum.Enum):
    NOT_PARTICIPANT = "not_participant"
    BLOCKED_BY_RECIPIENT = "blocked_by_recipient"


def is_participant(room: ChatRoom, user_id: int) -> bool:
    return user_id == room.buyer_id or user_id == room.seller_id


def other_participant(room: ChatRoom, user_id: int) -> int:
    """The participant who is not user_id. Caller must check is_participant first."""
    return room.seller_id if user_id == room.buyer_id else room.buyer_id


def can_send(room: ChatRoom, sender_id: int, is_blocked: BlockLookup) -> Optional[Denial]:
    """
    None when sender_id may post in room, otherwise the reason.

    Only the recipient's block gates a send; a block placed by the sender
    just hides the room from the sender's own listing.
    """
    if not is_participant(room, sender_id):
        return Denial.NOT_PARTICIPANT
    if is_blocked(other_participant(room, sender_id), sender_id):
        return Denial.BLOCKED_BY_RECIPIENT
    return None
