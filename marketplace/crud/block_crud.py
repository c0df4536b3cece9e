"""
Block CRUD.
"""
from typing import List, Optional
from sqlalchemy import desc
from sqlalchemy.orm import Session

from marketplace.model.block import Block
from marketplace.crud.base import CRUDBase


class CRUDBlock(CRUDBase[Block, dict, dict]):
    def get_by_pair(self, db: Session, *, blocker_id: int, blocked_id: int) -> Optional[Block]:
        return (
            db.query(self.model)
            .filter(
                self.model.blocker_id == blocker_id,
                self.model.blocked_user_id == blocked_id,
            )
            .first()
        )

    def is_blocked(self, db: Session, *, blocker_id: int, blocked_id: int) -> bool:
        """True if blocker_id has blocked blocked_id."""
        return self.get_by_pair(db, blocker_id=blocker_id, blocked_id=blocked_id) is not None

    def list_by_blocker(self, db: Session, *, blocker_id: int) -> List[Block]:
        return (
            db.query(self.model)
            .filter(self.model.blocker_id == blocker_id)
            .order_by(desc(self.model.created_at), desc(self.model.id))
            .all()
        )

    def blocked_ids(self, db: Session, *, blocker_id: int) -> set:
        rows = (
            db.query(self.model.blocked_user_id)
            .filter(self.model.blocker_id == blocker_id)
            .all()
        )
        return {r[0] for r in rows}


block_crud = CRUDBlock(Block)
