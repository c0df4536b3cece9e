from marketplace.crud.user_crud import user_crud
from marketplace.crud.product_crud import product_crud
from marketplace.crud.block_crud import block_crud
from marketplace.crud.chat_room_crud import chat_room_crud
from marketplace.crud.chat_message_crud import chat_message_crud

__all__ = [
    "user_crud",
    "product_crud",
    "block_crud",
    "chat_room_crud",
    "chat_message_crud",
]
