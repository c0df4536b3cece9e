"""
User lookups (decoration only).
"""
from marketplace.model.user import User
from marketplace.crud.base import CRUDBase


class CRUDUser(CRUDBase[User, dict, dict]):
    """User-specific CRUD operations."""


user_crud = CRUDUser(User)
