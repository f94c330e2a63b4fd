"""
Base repository with standardized CRUD operations, transaction management, and error handling.

Provides the foundation for all domain repositories. Driver and ORM
errors never leave a repository untranslated: uniqueness violations
become ``DuplicateEntityError``, other integrity violations become
``ConstraintViolationError`` and everything else becomes a
``DatabaseError``.
"""

from contextlib import contextmanager
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    ResourceNotFoundError,
    handle_database_exception,
    handle_integrity_error,
)
from app.core.logging import get_logger
from app.models.base import BaseModel

logger = get_logger(__name__)

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with standardized operations.

    Provides CRUD operations, transaction management, and error handling
    for all domain repositories.
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

    # ==================== Transaction Management ====================

    @contextmanager
    def transaction(self):
        """
        Transaction context manager with automatic rollback.

        Usage:
            with repository.transaction():
                repository.create(entity, commit=False)
        """
        try:
            yield self.db
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Transaction rollback on integrity error: {e.orig}")
            raise self._integrity_error(e) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Transaction rollback: {str(e)}", exc_info=True)
            raise handle_database_exception(e, "transaction") from e
        except Exception:
            self.db.rollback()
            raise

    def _integrity_error(self, exc: IntegrityError):
        return handle_integrity_error(exc, self.model.__name__, table=self.model.__tablename__)

    def commit(self):
        """Commit current transaction."""
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise handle_database_exception(e, "commit") from e

    def rollback(self):
        """Rollback current transaction."""
        self.db.rollback()

    # ==================== Create Operations ====================

    def create(self, entity: ModelType, commit: bool = True) -> ModelType:
        """
        Persist a new entity.

        Args:
            entity: Entity to create
            commit: Whether to commit immediately (otherwise only flush)

        Returns:
            Created entity

        Raises:
            DuplicateEntityError: If a unique constraint is violated
            ConstraintViolationError: If any other constraint is violated
            DatabaseError: For any other database failure
        """
        try:
            self.db.add(entity)

            if commit:
                self.db.commit()
                self.db.refresh(entity)
            else:
                self.db.flush()

            logger.info(f"Created {self.model.__name__} with id: {entity.id}")
            return entity

        except IntegrityError as e:
            self.db.rollback()
            raise self._integrity_error(e) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Create {self.model.__name__} failed: {e}", exc_info=True)
            raise handle_database_exception(e, "create") from e

    # ==================== Read Operations ====================

    def find_by_id(self, id: str) -> Optional[ModelType]:
        """
        Find entity by ID.

        Returns:
            Entity or None
        """
        try:
            return self.db.query(self.model).filter(self.model.id == id).first()
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "find_by_id") from e

    def get_by_id(self, id: str) -> ModelType:
        """
        Get entity by ID or raise exception.

        Raises:
            ResourceNotFoundError: If entity not found
        """
        entity = self.find_by_id(id)
        if not entity:
            raise ResourceNotFoundError(self.model.__name__, id)
        return entity

    def exists(self, id: str) -> bool:
        """Check whether an entity with ``id`` exists."""
        try:
            return self.db.query(self.model.id).filter(self.model.id == id).first() is not None
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "exists") from e

    def find_all(self, skip: int = 0, limit: int = 100) -> List[ModelType]:
        """Find all entities with pagination."""
        try:
            return self.db.query(self.model).offset(skip).limit(limit).all()
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "find_all") from e

    def count(self, criteria: Optional[Dict[str, Any]] = None) -> int:
        """
        Count entities matching simple equality criteria.

        Args:
            criteria: Column name to value; list values match with IN
        """
        try:
            query = self.db.query(func.count(self.model.id))
            for key, value in (criteria or {}).items():
                column = getattr(self.model, key)
                if isinstance(value, (list, tuple)):
                    query = query.filter(column.in_(value))
                else:
                    query = query.filter(column == value)
            return query.scalar() or 0
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "count") from e
