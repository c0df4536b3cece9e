"""
Session Middleware - loads session from Redis for each HTTP request.
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from typing import Callable
import redis
from marketplace.session import extract_token, get_session
import logging

logger = logging.getLogger(__name__)


class SessionMiddleware(BaseHTTPMiddleware):
    """Loads session from Redis based on Authorization header."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.session = {}
        request.state.token = None

        token = extract_token(request.headers.get("authorization"))

        if token:
            # An unreachable session store reads as an expired session, not a 500
            request.state.token = token
            try:
                user_data = get_session(token)
            except (redis.RedisError, RuntimeError) as e:
                logger.error(f"Session lookup failed: {e}")
                user_data = None
            if user_data:
                request.state.session = user_data

        return await call_next(request)
