# backend/drivigo/repositories/progress_repository.py
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import distinct, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from ..models.instructor import InstructorProfile
from ..models.progress import StudentProgress
from ..models.user import User
from .base_repository import BaseRepository


class ProgressRepository(BaseRepository[StudentProgress]):
    def __init__(self, db: Session):
        super().__init__(db, StudentProgress)

    def get_by_booking(self, booking_id: str) -> Optional[StudentProgress]:
        return self.find_one_by(booking_id=booking_id)

    def sum_completed_hours(
        self, learner_user_id: str, exclude_booking_id: Optional[str] = None
    ) -> Decimal:
        try:
            query = self.db.query(
                func.coalesce(func.sum(StudentProgress.driving_hours_logged), 0)
            ).filter(
                StudentProgress.learner_user_id == learner_user_id,
                StudentProgress.lesson_completed.is_(True),
            )
            if exclude_booking_id:
                query = query.filter(StudentProgress.booking_id != exclude_booking_id)
            return Decimal(str(query.scalar() or 0))
        except SQLAlchemyError as e:
            self.logger.error("Error summing hours for %s: %s", learner_user_id, e)
            raise RepositoryException(f"Failed to compute driving hours: {e}") from e

    def upsert_for_booking(self, booking_id: str, **fields: Any) -> StudentProgress:
        progress = self.get_by_booking(booking_id)
        if progress is None:
            return self.create(booking_id=booking_id, **fields)
        for key, value in fields.items():
            setattr(progress, key, value)
        self.db.flush()
        return progress

    def list_for_learner(self, learner_user_id: str) -> List[Dict[str, Any]]:
        instructor = aliased(User)
        try:
            rows = (
                self.db.query(
                    StudentProgress,
                    instructor.name,
                    instructor.email,
                    InstructorProfile.car_model,
                    Booking.session_plan,
                )
                .join(instructor, instructor.id == StudentProgress.instructor_user_id)
                .outerjoin(
                    InstructorProfile,
                    InstructorProfile.user_id == StudentProgress.instructor_user_id,
                )
                .outerjoin(Booking, Booking.id == StudentProgress.booking_id)
                .filter(StudentProgress.learner_user_id == learner_user_id)
                .order_by(StudentProgress.lesson_date.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error listing progress for %s: %s", learner_user_id, e)
            raise RepositoryException(f"Failed to retrieve progress: {e}") from e

        return [
            {
                **self.to_dict(progress),
                "instructor_name": name,
                "instructor_email": email,
                "car_model": car_model,
                "session_plan": session_plan,
            }
            for progress, name, email, car_model, session_plan in rows
        ]

    def list_for_instructor(self, instructor_user_id: str) -> List[Dict[str, Any]]:
        learner = aliased(User)
        try:
            rows = (
                self.db.query(StudentProgress, learner.name, learner.email, Booking.session_plan)
                .join(learner, learner.id == StudentProgress.learner_user_id)
                .outerjoin(Booking, Booking.id == StudentProgress.booking_id)
                .filter(StudentProgress.instructor_user_id == instructor_user_id)
                .order_by(StudentProgress.lesson_date.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error listing teaching history for %s: %s", instructor_user_id, e)
            raise RepositoryException(f"Failed to retrieve teaching history: {e}") from e

        return [
            {
                **self.to_dict(progress),
                "learner_name": name,
                "learner_email": email,
                "session_plan": session_plan,
            }
            for progress, name, email, session_plan in rows
        ]

    def completed_for_learner(self, learner_user_id: str) -> List[StudentProgress]:
        try:
            return (
                self.db.query(StudentProgress)
                .filter(
                    StudentProgress.learner_user_id == learner_user_id,
                    StudentProgress.lesson_completed.is_(True),
                )
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error loading completed lessons for %s: %s", learner_user_id, e)
            raise RepositoryException(f"Failed to retrieve progress: {e}") from e

    def learner_stats(self, learner_user_id: str) -> Dict[str, Any]:
        try:
            row = (
                self.db.query(
                    func.count(StudentProgress.id),
                    func.coalesce(func.sum(StudentProgress.driving_hours_logged), 0),
                    func.coalesce(func.avg(StudentProgress.performance_rating), 0),
                    func.coalesce(func.max(StudentProgress.total_driving_hours), 0),
                )
                .filter(
                    StudentProgress.learner_user_id == learner_user_id,
                    StudentProgress.lesson_completed.is_(True),
                )
                .one()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error computing learner stats for %s: %s", learner_user_id, e)
            raise RepositoryException(f"Failed to compute progress stats: {e}") from e

        total_lessons, total_hours, average_rating, cumulative_hours = row
        return {
            "total_lessons": int(total_lessons),
            "total_hours": float(total_hours),
            "average_rating": float(average_rating),
            "cumulative_hours": float(cumulative_hours),
        }

    def instructor_stats(self, instructor_user_id: str) -> Dict[str, Any]:
        try:
            row = (
                self.db.query(
                    func.count(StudentProgress.id),
                    func.count(distinct(StudentProgress.learner_user_id)),
                    func.coalesce(func.sum(StudentProgress.driving_hours_logged), 0),
                    func.coalesce(func.avg(StudentProgress.performance_rating), 0),
                )
                .filter(
                    StudentProgress.instructor_user_id == instructor_user_id,
                    StudentProgress.lesson_completed.is_(True),
                )
                .one()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error computing teaching stats for %s: %s", instructor_user_id, e)
            raise RepositoryException(f"Failed to compute teaching stats: {e}") from e

        lessons, students, hours, rating = row
        return {
            "total_lessons_taught": int(lessons),
            "unique_students": int(students),
            "total_hours_taught": float(hours),
            "average_student_rating": float(rating),
        }

    @staticmethod
    def to_dict(progress: StudentProgress) -> Dict[str, Any]:
        return {
            "id": progress.id,
            "learner_user_id": progress.learner_user_id,
            "instructor_user_id": progress.instructor_user_id,
            "booking_id": progress.booking_id,
            "lesson_date": progress.lesson_date,
            "lesson_type": progress.lesson_type,
            "skills_practiced": list(progress.skills_practiced or []),
            "performance_rating": progress.performance_rating,
            "instructor_notes": progress.instructor_notes,
            "areas_to_improve": list(progress.areas_to_improve or []),
            "driving_hours_logged": float(progress.driving_hours_logged or 0),
            "total_driving_hours": float(progress.total_driving_hours or 0),
            "next_lesson_recommendations": progress.next_lesson_recommendations,
            "lesson_completed": progress.lesson_completed,
        }
