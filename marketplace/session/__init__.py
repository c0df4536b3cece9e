from .session_layer import (
    init_redis,
    close_redis,
    get_session,
    get_session_user_id,
    extract_token,
)

__all__ = [
    "init_redis",
    "close_redis",
    "get_session",
    "get_session_user_id",
    "extract_token",
]
