"""
Application exceptions. Raised from routes and services, rendered by FastAPI
as {"detail": {"code": ..., "message": ...}}.
"""
from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class MarketplaceException(HTTPException):
    """Base exception carrying a machine-readable code and a user-facing message."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        headers: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        super().__init__(
            status_code=status_code,
            detail={"code": code, "message": message},
            headers=headers,
        )


class NotAuthenticated(MarketplaceException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="NOT_AUTHENTICATED",
            message="Login required.",
            headers={"WWW-Authenticate": "Bearer"},
        )


class SessionExpired(MarketplaceException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="SESSION_EXPIRED",
            message="Session expired or invalid. Please log in again.",
            headers={"WWW-Authenticate": "Bearer"},
        )


class NotFound(MarketplaceException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            code="NOT_FOUND",
            message=f"{resource} not found.",
        )


class Forbidden(MarketplaceException):
    def __init__(self, message: str = "You do not have access to this chat room."):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            code="FORBIDDEN",
            message=message,
        )


class BlockedByRecipient(MarketplaceException):
    """The other participant has blocked the sender."""

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            code="BLOCKED_BY_RECIPIENT",
            message="The other user has blocked you. You cannot send messages.",
        )


class ValidationFailed(MarketplaceException):
    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            code=code,
            message=message,
        )
