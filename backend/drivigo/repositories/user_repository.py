# backend/drivigo/repositories/user_repository.py
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.user import User
from .base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup; emails are stored lower-cased."""
        try:
            return (
                self.db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error getting user by email: %s", e)
            raise RepositoryException(f"Failed to retrieve user: {e}") from e
