# backend/drivigo/repositories/booking_repository.py
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from ..core.exceptions import RepositoryException
from ..models.booking import Booking, BookingStatus
from ..models.instructor import InstructorProfile
from ..models.user import User
from .base_repository import BaseRepository


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def list_confirmed_for_instructor(self, instructor_user_id: str) -> List[Dict[str, Any]]:
        learner = aliased(User)
        try:
            rows = (
                self.db.query(Booking, learner.email)
                .join(learner, learner.id == Booking.learner_user_id)
                .filter(
                    Booking.instructor_user_id == instructor_user_id,
                    Booking.status == BookingStatus.CONFIRMED.value,
                )
                .order_by(Booking.start_date, Booking.time_slot)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error listing instructor bookings: %s", e)
            raise RepositoryException(f"Failed to retrieve bookings: {e}") from e

        return [
            {
                "id": booking.id,
                "start_date": booking.start_date,
                "time_slot": booking.time_slot,
                "learner_email": learner_email,
            }
            for booking, learner_email in rows
        ]

    def list_confirmed_for_learner(self, learner_user_id: str) -> List[Dict[str, Any]]:
        instructor = aliased(User)
        try:
            rows = (
                self.db.query(Booking, instructor.email, InstructorProfile)
                .join(instructor, instructor.id == Booking.instructor_user_id)
                .outerjoin(
                    InstructorProfile, InstructorProfile.user_id == Booking.instructor_user_id
                )
                .filter(
                    Booking.learner_user_id == learner_user_id,
                    Booking.status == BookingStatus.CONFIRMED.value,
                )
                .order_by(Booking.start_date)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error listing learner bookings: %s", e)
            raise RepositoryException(f"Failed to retrieve bookings: {e}") from e

        return [
            {
                "id": booking.id,
                "start_date": booking.start_date,
                "time_slot": booking.time_slot,
                "session_plan": booking.session_plan,
                "instructor_email": instructor_email,
                "phone_number": profile.phone_number if profile else None,
                "car_model": profile.car_model if profile else None,
            }
            for booking, instructor_email, profile in rows
        ]

    def get_detail(self, booking_id: str) -> Optional[Dict[str, Any]]:
        learner = aliased(User)
        instructor = aliased(User)
        try:
            row = (
                self.db.query(Booking, learner.email, instructor.email)
                .join(learner, learner.id == Booking.learner_user_id)
                .join(instructor, instructor.id == Booking.instructor_user_id)
                .filter(Booking.id == booking_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error getting booking %s: %s", booking_id, e)
            raise RepositoryException(f"Failed to retrieve booking: {e}") from e

        if row is None:
            return None
        booking, learner_email, instructor_email = row
        return {
            "id": booking.id,
            "start_date": booking.start_date,
            "time_slot": booking.time_slot,
            "session_plan": booking.session_plan,
            "status": booking.status,
            "learner_user_id": booking.learner_user_id,
            "instructor_user_id": booking.instructor_user_id,
            "learner_email": learner_email,
            "instructor_email": instructor_email,
        }

    def list_confirmed_on(self, on_date: date) -> List[Booking]:
        """Confirmed bookings starting on ``on_date`` (used by the reminder job)."""
        try:
            return (
                self.db.query(Booking)
                .filter(
                    Booking.start_date == on_date,
                    Booking.status == BookingStatus.CONFIRMED.value,
                )
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error listing bookings for %s: %s", on_date, e)
            raise RepositoryException(f"Failed to retrieve bookings: {e}") from e

    def mark_completed(self, booking_id: str) -> Optional[Booking]:
        return self.update(booking_id, status=BookingStatus.COMPLETED.value)

    def get_by_payment_id(self, razorpay_payment_id: str) -> Optional[Booking]:
        return self.find_one_by(razorpay_payment_id=razorpay_payment_id)
