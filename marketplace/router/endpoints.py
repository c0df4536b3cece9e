"""
API Router - all endpoints.
"""
from fastapi import APIRouter
from marketplace.router import push
from marketplace.router.api.v1 import blocks, chat

api_router = APIRouter(prefix="/api")

api_router.include_router(
    chat.router,
    prefix="/chats",
    tags=["Chat"],
)

api_router.include_router(
    blocks.router,
    prefix="/blocks",
    tags=["Blocks"],
)

push_router = push.router
