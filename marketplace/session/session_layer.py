"""
Session layer - Redis-based token store lookups.
Sessions are written by the identity service; this service only reads them.
"""
from typing import Optional, Dict, Any
import logging
import json
import redis

logger = logging.getLogger(__name__)

# Redis connection pool and client
_redis_pool: Optional[redis.ConnectionPool] = None
_redis_client: Optional[redis.Redis] = None


def init_redis(host: str, port: int, db: int) -> None:
    """Initialize Redis connection pool. Call once at app startup."""
    global _redis_pool, _redis_client
    _redis_pool = redis.ConnectionPool(
        host=host,
        port=port,
        db=db,
        decode_responses=True,
        max_connections=10
    )
    _redis_client = redis.Redis(connection_pool=_redis_pool)
    logger.info(f"Redis initialized: {host}:{port}/{db}")


def close_redis() -> None:
    global _redis_pool, _redis_client
    if _redis_pool is not None:
        _redis_pool.disconnect()
    _redis_pool = None
    _redis_client = None


def _get_redis_client() -> redis.Redis:
    """Get Redis client. Raises if not initialized."""
    if _redis_client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis_client


def get_session(token: str) -> Optional[Dict[str, Any]]:
    """Get user data from Redis session if token exists."""
    client = _get_redis_client()
    data = client.get(f"session:{token}")
    if data:
        return json.loads(data)
    return None


def get_session_user_id(token: str) -> Optional[int]:
    """User id bound to token, or None when the session is missing or has no user."""
    session = get_session(token)
    if not session or session.get("user_id") is None:
        return None
    try:
        return int(session["user_id"])
    except (TypeError, ValueError):
        logger.warning("Session for token has a malformed user_id")
        return None


def extract_token(auth_header: Optional[str]) -> Optional[str]:
    """Extract bearer token from Authorization header."""
    if not auth_header:
        return None

    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]
