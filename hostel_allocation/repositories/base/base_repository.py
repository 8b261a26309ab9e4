"""
Base repository with standardized CRUD operations and error handling.

Repositories only flush; the owning service decides when a unit of work
commits, so multi-entity updates stay atomic.
"""

from typing import Any, Dict, Generic, List, Optional, Type

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hostel_allocation.core.exceptions import NotFoundError, RepositoryError
from hostel_allocation.core.logging import get_logger
from hostel_allocation.models.base import ModelType

logger = get_logger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository over one SQLAlchemy model.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    # ==================== Create Operations ====================

    def create(self, entity: ModelType) -> ModelType:
        """
        Add a new entity and flush it so generated values are populated.

        Args:
            entity: Entity to create

        Returns:
            Created entity
        """
        try:
            self.db.add(entity)
            self.db.flush()
            logger.debug(f"Created {self.model.__name__} with id: {entity.id}")
            return entity
        except SQLAlchemyError as e:
            raise RepositoryError(f"Create failed: {str(e)}") from e

    # ==================== Read Operations ====================

    def find_by_id(self, id: str, for_update: bool = False) -> Optional[ModelType]:
        """
        Find entity by ID.

        Args:
            id: Entity ID
            for_update: Lock the row until the transaction ends

        Returns:
            Entity or None
        """
        try:
            stmt = select(self.model).where(self.model.id == id)
            if for_update:
                stmt = stmt.with_for_update().execution_options(populate_existing=True)
            return self.db.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by ID failed: {str(e)}") from e

    def get_by_id(self, id: str, for_update: bool = False) -> ModelType:
        """
        Get entity by ID or raise exception.

        Raises:
            NotFoundError: If entity not found
        """
        entity = self.find_by_id(id, for_update=for_update)
        if entity is None:
            raise NotFoundError(self.model.__name__, str(id))
        return entity

    def find_all(self, skip: int = 0, limit: int = 100) -> List[ModelType]:
        try:
            stmt = select(self.model).offset(skip).limit(limit)
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find all failed: {str(e)}") from e

    def find_by_criteria(
        self,
        criteria: Dict[str, Any],
        limit: Optional[int] = None,
        order_by: Optional[List[str]] = None,
    ) -> List[ModelType]:
        """
        Find entities matching criteria.

        Args:
            criteria: Filter criteria as key-value pairs (lists become IN filters)
            limit: Maximum number of records
            order_by: List of fields to order by (prefix with - for desc)

        Returns:
            List of matching entities
        """
        try:
            stmt = select(self.model)

            for key, value in criteria.items():
                column = getattr(self.model, key)
                if isinstance(value, (list, tuple, set, frozenset)):
                    stmt = stmt.where(column.in_(list(value)))
                else:
                    stmt = stmt.where(column == value)

            for field in order_by or []:
                if field.startswith('-'):
                    stmt = stmt.order_by(getattr(self.model, field[1:]).desc())
                else:
                    stmt = stmt.order_by(getattr(self.model, field))

            if limit is not None:
                stmt = stmt.limit(limit)

            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by criteria failed: {str(e)}") from e

    def find_one_by_criteria(self, criteria: Dict[str, Any]) -> Optional[ModelType]:
        results = self.find_by_criteria(criteria, limit=1)
        return results[0] if results else None

    # ==================== Update Operations ====================

    def update(self, entity: ModelType, data: Dict[str, Any]) -> ModelType:
        """
        Apply field updates to a loaded entity and flush.
        """
        try:
            for key, value in data.items():
                if not hasattr(entity, key):
                    raise AttributeError(f"{self.model.__name__} has no field '{key}'")
                setattr(entity, key, value)
            self.db.flush()
            logger.debug(f"Updated {self.model.__name__} with id: {entity.id}")
            return entity
        except SQLAlchemyError as e:
            raise RepositoryError(f"Update failed: {str(e)}") from e

    # ==================== Delete Operations ====================

    def delete(self, entity: ModelType) -> None:
        try:
            self.db.delete(entity)
            self.db.flush()
            logger.debug(f"Deleted {self.model.__name__} with id: {entity.id}")
        except SQLAlchemyError as e:
            raise RepositoryError(f"Delete failed: {str(e)}") from e
