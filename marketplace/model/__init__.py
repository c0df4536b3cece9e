from marketplace.model.user import User
from marketplace.model.product import Product
from marketplace.model.chat_room import ChatRoom
from marketplace.model.chat_message import ChatMessage
from marketplace.model.block import Block

__all__ = ["User", "Product", "ChatRoom", "ChatMessage", "Block"]
