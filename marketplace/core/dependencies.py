"""
FastAPI dependencies for route protection and chat service access.
"""
from typing import Any, Dict, Optional
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from marketplace.core.exceptions import NotAuthenticated, SessionExpired

# Security scheme for OpenAPI docs. auto_error is off so a missing token
# surfaces as NotAuthenticated (401) from validate_session.
bearer_scheme = HTTPBearer(
    scheme_name="Bearer",
    description="Session token issued by the identity service",
    auto_error=False,
)


async def validate_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict[str, Any]:
    """
    Validates session loaded by middleware.

    Returns:
        Session dict with at least user_id

    Raises:
        NotAuthenticated: No token provided
        SessionExpired: Token not found in Redis
    """
    if not request.state.token:
        raise NotAuthenticated()

    if not request.state.session:
        raise SessionExpired()

    return request.state.session


async def current_user_id(
    current_user: Dict[str, Any] = Depends(validate_session),
) -> int:
    """Integer id of the authenticated user."""
    try:
        return int(current_user["user_id"])
    except (KeyError, TypeError, ValueError):
        raise SessionExpired()


def get_chat_service(request: Request):
    """ChatService constructed at startup (see main.lifespan)."""
    return request.app.state.chat_service


def get_push_channel(request: Request):
    return request.app.state.push_channel
