"""
Blocks API: the current user's block list.
A block by the recipient stops chat sends; a block by the viewer hides rooms from their list.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.core.database import get_db
from marketplace.core.dependencies import current_user_id
from marketplace.core.exceptions import NotFound, ValidationFailed
from marketplace.crud import block_crud, user_crud
from marketplace.schema.block import BlockCreateBody, BlockResponse
from marketplace.schema.common import UserSummary

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[BlockResponse])
async def list_blocks(
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    blocks = block_crud.list_by_blocker(db, blocker_id=user_id)
    users = user_crud.get_many(db, [b.blocked_user_id for b in blocks])
    items = []
    for block in blocks:
        item = BlockResponse.model_validate(block)
        blocked_user = users.get(block.blocked_user_id)
        item.blocked_user = UserSummary.model_validate(blocked_user) if blocked_user else None
        items.append(item)
    return items


@router.post("", response_model=BlockResponse, status_code=status.HTTP_201_CREATED)
async def create_block(
    body: BlockCreateBody,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    if body.blocked_user_id == user_id:
        raise ValidationFailed("You cannot block yourself.", code="INVALID_BLOCK")
    if block_crud.is_blocked(db, blocker_id=user_id, blocked_id=body.blocked_user_id):
        raise ValidationFailed("User is already blocked.", code="ALREADY_BLOCKED")
    try:
        block = block_crud.create_from_dict(
            db, obj_in={"blocker_id": user_id, "blocked_user_id": body.blocked_user_id}
        )
    except IntegrityError:
        db.rollback()
        raise ValidationFailed("Could not block this user.", code="INVALID_BLOCK")
    logger.info(f"User {user_id} blocked user {body.blocked_user_id}")
    return block


@router.delete("/{blocked_user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_block(
    blocked_user_id: int,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    block = block_crud.get_by_pair(db, blocker_id=user_id, blocked_id=blocked_user_id)
    if not block:
        raise NotFound("Block")
    block_crud.remove(db, db_obj=block)
    logger.info(f"User {user_id} unblocked user {blocked_user_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
