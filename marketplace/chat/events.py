"""
Push channel frames.

Inbound frames are validated once here into typed commands; handlers never
see raw dicts. Outbound frames are plain dicts built by the helpers below.
"""
import time
from typing import Annotated, Any, Dict, Literal, Union

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, ValidationError

from marketplace.core.config import settings
from marketplace.model.chat_message import ChatMessage
from marketplace.schema.chat import MessageResponse


class FrameError(Exception):
    """Inbound frame could not be parsed into a command."""

    def __init__(self, message: str, code: str = "INVALID_FRAME"):
        self.code = code
        self.message = message
        super().__init__(message)


# --- Inbound ---

class AuthFrame(BaseModel):
    type: Literal["auth"]
    user_id: int = Field(validation_alias=AliasChoices("userId", "user_id"))


class ChatMessageFrame(BaseModel):
    type: Literal["chat_message"]
    room_id: int = Field(validation_alias=AliasChoices("roomId", "chatRoomId", "room_id"))
    text: str = Field(
        validation_alias=AliasChoices("text", "message"),
        max_length=settings.CHAT_MESSAGE_MAX_LENGTH,
    )


class MarkReadFrame(BaseModel):
    type: Literal["mark_read"]
    room_id: int = Field(validation_alias=AliasChoices("roomId", "chatRoomId", "room_id"))


InboundFrame = Annotated[
    Union[AuthFrame, ChatMessageFrame, MarkReadFrame],
    Field(discriminator="type"),
]

_inbound_adapter = TypeAdapter(InboundFrame)


def parse_frame(raw: str) -> Union[AuthFrame, ChatMessageFrame, MarkReadFrame]:
    """Parse a text frame. Raises FrameError with a client-facing message."""
    try:
        return _inbound_adapter.validate_json(raw)
    except ValidationError as e:
        raise _frame_error(e)


def _frame_error(exc: ValidationError) -> FrameError:
    err = exc.errors()[0]
    kind = err.get("type", "")
    loc = err.get("loc") or ()
    if kind == "json_invalid":
        return FrameError("Frame must be valid JSON.", code="INVALID_JSON")
    if kind in ("union_tag_not_found", "union_tag_invalid", "model_attributes_type", "model_type"):
        return FrameError("Unknown or missing message type.", code="UNKNOWN_TYPE")
    field = loc[-1] if loc else "frame"
    if kind == "missing":
        return FrameError(f"Missing required field: {field}.", code="MISSING_FIELD")
    return FrameError(f"Invalid value for {field}: {err.get('msg', 'invalid')}.")


# --- Outbound ---

def message_payload(msg: ChatMessage) -> Dict[str, Any]:
    return MessageResponse.model_validate(msg).model_dump(mode="json", by_alias=True)


def auth_success(user_id: int) -> Dict[str, Any]:
    return {"type": "auth_success", "userId": user_id, "timestamp": int(time.time() * 1000)}


def new_message(room_id: int, msg: ChatMessage) -> Dict[str, Any]:
    return {"type": "new_message", "roomId": room_id, "message": message_payload(msg)}


def messages_marked_read(room_id: int) -> Dict[str, Any]:
    return {"type": "messages_marked_read", "roomId": room_id}


def messages_read(room_id: int, reader_id: int) -> Dict[str, Any]:
    """Read receipt for the other participant."""
    return {"type": "messages_read", "roomId": room_id, "readerId": reader_id}


def error(message: str, code: str = "ERROR") -> Dict[str, Any]:
    return {"type": "error", "code": code, "message": message}
