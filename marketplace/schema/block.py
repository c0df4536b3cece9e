"""
Block schemas.
"""
from datetime import datetime
from typing import Optional

from marketplace.schema.common import CamelModel, UserSummary


class BlockCreateBody(CamelModel):
    blocked_user_id: int


class BlockResponse(CamelModel):
    id: int
    blocker_id: int
    blocked_user_id: int
    created_at: Optional[datetime] = None
    blocked_user: Optional[UserSummary] = None
