# backend/drivigo/repositories/availability_repository.py
from typing import Iterable, List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.instructor import InstructorAvailability
from .base_repository import BaseRepository


class AvailabilityRepository(BaseRepository[InstructorAvailability]):
    def __init__(self, db: Session):
        super().__init__(db, InstructorAvailability)

    def list_for_instructor(self, instructor_id: str) -> List[InstructorAvailability]:
        try:
            return (
                self.db.query(InstructorAvailability)
                .filter(InstructorAvailability.instructor_id == instructor_id)
                .order_by(InstructorAvailability.day_of_week, InstructorAvailability.time_slot)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error listing availability for %s: %s", instructor_id, e)
            raise RepositoryException(f"Failed to retrieve availability: {e}") from e

    def delete_for_instructor(self, instructor_id: str) -> int:
        try:
            deleted = (
                self.db.query(InstructorAvailability)
                .filter(InstructorAvailability.instructor_id == instructor_id)
                .delete()
            )
            self.db.flush()
            return deleted
        except SQLAlchemyError as e:
            self.logger.error("Error deleting availability for %s: %s", instructor_id, e)
            raise RepositoryException(f"Failed to delete availability: {e}") from e

    def bulk_create(
        self, instructor_id: str, slots: Iterable[Tuple[str, str]]
    ) -> List[InstructorAvailability]:
        """Insert (day, slot) pairs; the caller is responsible for de-duplication."""
        try:
            rows = [
                InstructorAvailability(instructor_id=instructor_id, day_of_week=day, time_slot=slot)
                for day, slot in slots
            ]
            self.db.add_all(rows)
            self.db.flush()
            return rows
        except SQLAlchemyError as e:
            self.logger.error("Error inserting availability for %s: %s", instructor_id, e)
            raise RepositoryException(f"Failed to save availability: {e}") from e
