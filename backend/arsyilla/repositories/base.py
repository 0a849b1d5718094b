"""Base repository with the shared persistence helpers.

Subclasses set ``model_class``; the base provides counting and the
add-and-commit step every create path goes through.
"""

from typing import TypeVar, Generic, Type
from sqlalchemy.orm import Session, Query

from ..database import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Shared repository logic for SQLAlchemy models."""

    model_class: Type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self) -> Query:
        return self.db.query(self.model_class)

    def count(self) -> int:
        return self._base_query().count()

    def add(self, entity: ModelT) -> ModelT:
        """Persist a new entity and return it refreshed."""
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity
