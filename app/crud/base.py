"""
Base CRUD operations with SQLAlchemy 2.x patterns.
Writes only flush; the caller's unit_of_work() decides when to commit.
"""
from sqlalchemy import select
from sqlalchemy.orm import Session
import logging
from typing import TypeVar, Generic, Type, Optional, Dict, Any
from app.database import Base
from app.exceptions import NotFoundError

logger = logging.getLogger(__name__)
ModelType = TypeVar("ModelType", bound=Base)

class CRUDBase(Generic[ModelType]):
    def __init__(self, model: Type[ModelType], label: Optional[str] = None):
        self.model = model
        self.label = label or model.__name__

    def get(self, db: Session, id: int) -> Optional[ModelType]:
        """Get record by ID using SQLAlchemy 2.x select()"""
        stmt = select(self.model).where(self.model.id == id)
        return db.execute(stmt).scalar_one_or_none()

    def get_or_raise(self, db: Session, id: int) -> ModelType:
        obj = self.get(db, id)
        if obj is None:
            raise NotFoundError(f"{self.label} {id} not found")
        return obj

    def create(self, db: Session, *, obj_in: Dict[str, Any]) -> ModelType:
        db_obj = self.model(**obj_in)
        db.add(db_obj)
        db.flush()
        logger.info(f"Created {self.label} {db_obj.id}")
        return db_obj

    def update(self, db: Session, *, db_obj: ModelType, obj_in: Dict[str, Any]) -> ModelType:
        for field, value in obj_in.items():
            setattr(db_obj, field, value)
        db.flush()
        logger.info(f"Updated {self.label} {db_obj.id}: {sorted(obj_in)}")
        return db_obj

    def remove(self, db: Session, *, db_obj: ModelType) -> ModelType:
        db.delete(db_obj)
        db.flush()
        logger.info(f"Deleted {self.label} {db_obj.id}")
        return db_obj
