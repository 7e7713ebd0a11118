# backend/drivigo/repositories/base_repository.py
"""
Base Repository Pattern for the Drivigo platform.

Repositories own every SQLAlchemy query. They flush but never commit;
transaction boundaries belong to the service layer.
"""

from contextlib import contextmanager
import logging
from typing import Any, Generic, Iterator, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException
from ..database import get_dialect_name

T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Concrete base repository implementation with common data access patterns.

    Attributes:
        db: SQLAlchemy session
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @property
    def dialect_name(self) -> str:
        return get_dialect_name(self.db)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Context manager that commits/rolls back the underlying session."""
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as exc:
            self.logger.error("Repository transaction failed: %s", exc)
            self.db.rollback()
            raise
        except Exception:
            self.db.rollback()
            raise

    def get_by_id(self, id: str) -> Optional[T]:
        try:
            return self.db.query(self.model).filter(self.model.id == id).first()
        except SQLAlchemyError as e:
            self.logger.error("Error getting %s by id %s: %s", self.model.__name__, id, e)
            raise RepositoryException(f"Failed to retrieve {self.model.__name__}: {e}") from e

    def get_all(self, skip: int = 0, limit: int = 100) -> List[T]:
        try:
            return self.db.query(self.model).offset(skip).limit(limit).all()
        except SQLAlchemyError as e:
            self.logger.error("Error getting all %s: %s", self.model.__name__, e)
            raise RepositoryException(f"Failed to retrieve {self.model.__name__} list: {e}") from e

    def create(self, **kwargs: Any) -> T:
        """
        Create a new entity.

        Note: Does NOT commit - transaction management is handled by service layer.
        """
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()
            return entity
        except IntegrityError as exc:
            self.logger.error("Integrity error creating %s: %s", self.model.__name__, exc)
            self.db.rollback()
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as e:
            self.logger.error("Error creating %s: %s", self.model.__name__, e)
            self.db.rollback()
            raise RepositoryException(f"Failed to create {self.model.__name__}: {e}") from e

    def update(self, id: str, **kwargs: Any) -> Optional[T]:
        """Update only the provided fields; returns None when the row is missing."""
        try:
            entity = self.get_by_id(id)
            if not entity:
                return None
            for key, value in kwargs.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)
            self.db.flush()
            return entity
        except SQLAlchemyError as e:
            self.logger.error("Error updating %s %s: %s", self.model.__name__, id, e)
            self.db.rollback()
            raise RepositoryException(f"Failed to update {self.model.__name__}: {e}") from e

    def delete(self, id: str) -> bool:
        try:
            entity = self.get_by_id(id)
            if not entity:
                return False
            self.db.delete(entity)
            self.db.flush()
            return True
        except IntegrityError as e:
            self.logger.error(
                "Cannot delete %s %s due to constraints: %s", self.model.__name__, id, e
            )
            self.db.rollback()
            raise RepositoryException(f"Cannot delete due to existing references: {e}") from e
        except SQLAlchemyError as e:
            self.logger.error("Error deleting %s %s: %s", self.model.__name__, id, e)
            self.db.rollback()
            raise RepositoryException(f"Failed to delete {self.model.__name__}: {e}") from e

    def exists(self, **kwargs: Any) -> bool:
        try:
            return self.db.query(self.model).filter_by(**kwargs).first() is not None
        except SQLAlchemyError as e:
            self.logger.error("Error checking existence: %s", e)
            raise RepositoryException(f"Failed to check existence: {e}") from e

    def count(self, **kwargs: Any) -> int:
        try:
            return self.db.query(self.model).filter_by(**kwargs).count()
        except SQLAlchemyError as e:
            self.logger.error("Error counting records: %s", e)
            raise RepositoryException(f"Failed to count records: {e}") from e

    def find_by(self, **kwargs: Any) -> List[T]:
        try:
            return self.db.query(self.model).filter_by(**kwargs).all()
        except SQLAlchemyError as e:
            self.logger.error("Error finding by criteria: %s", e)
            raise RepositoryException(f"Failed to find records: {e}") from e

    def find_one_by(self, **kwargs: Any) -> Optional[T]:
        try:
            return self.db.query(self.model).filter_by(**kwargs).first()
        except SQLAlchemyError as e:
            self.logger.error("Error finding one by criteria: %s", e)
            raise RepositoryException(f"Failed to find record: {e}") from e

    def _query(self) -> Query:
        return self.db.query(self.model)
