"""
Base repository with standardized data access and error handling.

Repositories never commit; the calling service owns the transaction.
"""

from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from hostel_admin.config.logging import get_logger
from hostel_admin.core.exceptions import RepositoryError
from hostel_admin.models.base import BaseModel

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=BaseModel)


@dataclass
class PageResult(Generic[ModelType]):
    items: List[ModelType]
    total: int
    page: int
    limit: int


class BaseRepository(Generic[ModelType]):
    """
    Generic repository over one model class.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db

    def query(self) -> Query:
        return self.db.query(self.model)

    def add(self, entity: ModelType) -> ModelType:
        """Stage a new entity and flush so defaults (id, timestamps) are populated."""
        try:
            self.db.add(entity)
            self.db.flush()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Create {self.model.__name__} failed: {e}") from e
        logger.debug(f"Created {self.model.__name__} with id: {entity.id}")
        return entity

    def flush(self) -> None:
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Flush failed: {e}") from e

    def delete(self, entity: ModelType) -> None:
        self.db.delete(entity)
        self.flush()

    def find_by_id(self, id: Any) -> Optional[ModelType]:
        if id is None:
            return None
        return self.db.get(self.model, str(id))

    def find_one_by(self, **criteria: Any) -> Optional[ModelType]:
        return self.query().filter_by(**criteria).first()

    def find_by_criteria(
        self,
        criteria: Dict[str, Any],
        order_by: Optional[List[Any]] = None,
        limit: Optional[int] = None,
    ) -> List[ModelType]:
        """
        Find entities matching ``criteria``; list values become IN filters
        and ``None`` values are ignored.
        """
        query = self._apply_criteria(self.query(), criteria)
        if order_by:
            query = query.order_by(*order_by)
        if limit:
            query = query.limit(limit)
        return query.all()

    def count(self, criteria: Optional[Dict[str, Any]] = None) -> int:
        query = self._apply_criteria(self.db.query(func.count(self.model.id)), criteria or {})
        return query.scalar() or 0

    def paginate(self, query: Query, page: int, limit: int) -> PageResult[ModelType]:
        total = query.order_by(None).count()
        items = query.offset((page - 1) * limit).limit(limit).all()
        return PageResult(items=items, total=total, page=page, limit=limit)

    def count_by(self, column: Any, criteria: Optional[Dict[str, Any]] = None) -> Dict[Any, int]:
        """Group-by count of ``column`` values."""
        query = self._apply_criteria(self.db.query(column, func.count(self.model.id)), criteria or {})
        return {key: total for key, total in query.group_by(column).all()}

    def _apply_criteria(self, query: Query, criteria: Dict[str, Any]) -> Query:
        for key, value in criteria.items():
            if value is None:
                continue
            column = getattr(self.model, key)
            if isinstance(value, (list, tuple, set)):
                query = query.filter(column.in_(list(value)))
            else:
                query = query.filter(column == value)
        return query
