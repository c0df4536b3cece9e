"""
Generic CRUD base.
"""
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
from sqlalchemy.orm import Session

from marketplace.core.database import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType")
UpdateSchemaType = TypeVar("UpdateSchemaType")


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """Default get/create/delete on a single model."""

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        return db.get(self.model, id)

    def get_many(self, db: Session, ids: List[Any]) -> Dict[Any, ModelType]:
        """Map id -> row for the given ids; missing ids are absent from the map."""
        if not ids:
            return {}
        rows = db.query(self.model).filter(self.model.id.in_(set(ids))).all()
        return {row.id: row for row in rows}

    def create_from_dict(self, db: Session, *, obj_in: Dict[str, Any]) -> ModelType:
        db_obj = self.model(**obj_in)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def remove(self, db: Session, *, db_obj: ModelType) -> None:
        db.delete(db_obj)
        db.commit()
