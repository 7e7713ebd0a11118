# backend/drivigo/repositories/earnings_repository.py
"""
Instructor earnings ledger queries.

All aggregates run in SQL; only the month bucketing expression differs per
dialect.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, aliased

from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from ..models.earnings import InstructorEarnings, PaymentStatus
from ..models.instructor import InstructorProfile
from ..models.progress import StudentProgress
from ..models.user import User
from .base_repository import BaseRepository


def _money(value: Any) -> float:
    return float(value or 0)


class EarningsRepository(BaseRepository[InstructorEarnings]):
    def __init__(self, db: Session):
        super().__init__(db, InstructorEarnings)

    def upsert_for_booking(self, booking_id: str, **fields: Any) -> InstructorEarnings:
        earnings = self.find_one_by(booking_id=booking_id)
        if earnings is None:
            return self.create(booking_id=booking_id, **fields)
        for key, value in fields.items():
            setattr(earnings, key, value)
        self.db.flush()
        return earnings

    def refresh_profile_totals(self, instructor_user_id: str) -> None:
        """Recompute paid totals on the instructor profile from the ledger."""
        try:
            total, count = (
                self.db.query(
                    func.coalesce(func.sum(InstructorEarnings.net_earnings), 0),
                    func.count(InstructorEarnings.id),
                )
                .filter(
                    InstructorEarnings.instructor_user_id == instructor_user_id,
                    InstructorEarnings.payment_status == PaymentStatus.PAID.value,
                )
                .one()
            )
            self.db.query(InstructorProfile).filter(
                InstructorProfile.user_id == instructor_user_id
            ).update(
                {
                    InstructorProfile.total_earnings: Decimal(str(total)),
                    InstructorProfile.total_lessons_taught: int(count),
                }
            )
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error("Error refreshing totals for %s: %s", instructor_user_id, e)
            raise RepositoryException(f"Failed to refresh instructor totals: {e}") from e

    def _paid(self, instructor_user_id: str, since: Optional[date]) -> List[Any]:
        filters = [
            InstructorEarnings.instructor_user_id == instructor_user_id,
            InstructorEarnings.payment_status == PaymentStatus.PAID.value,
        ]
        if since is not None:
            filters.append(InstructorEarnings.lesson_date >= since)
        return filters

    def summary(self, instructor_user_id: str, since: Optional[date]) -> Dict[str, Any]:
        try:
            row = (
                self.db.query(
                    func.count(InstructorEarnings.id),
                    func.coalesce(func.sum(InstructorEarnings.amount_earned), 0),
                    func.coalesce(func.sum(InstructorEarnings.net_earnings), 0),
                    func.coalesce(func.sum(InstructorEarnings.platform_fee), 0),
                    func.coalesce(func.avg(InstructorEarnings.net_earnings), 0),
                )
                .filter(*self._paid(instructor_user_id, since))
                .one()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error computing earnings summary: %s", e)
            raise RepositoryException(f"Failed to compute earnings summary: {e}") from e

        lessons, revenue, net, fees, average = row
        return {
            "total_lessons": int(lessons),
            "total_revenue": _money(revenue),
            "total_net_earnings": _money(net),
            "total_fees": _money(fees),
            "avg_earning_per_lesson": round(_money(average), 2),
        }

    def daily(
        self, instructor_user_id: str, since: Optional[date], limit: int
    ) -> List[Dict[str, Any]]:
        try:
            rows = (
                self.db.query(
                    InstructorEarnings.lesson_date,
                    func.count(InstructorEarnings.id),
                    func.sum(InstructorEarnings.net_earnings),
                )
                .filter(*self._paid(instructor_user_id, since))
                .group_by(InstructorEarnings.lesson_date)
                .order_by(InstructorEarnings.lesson_date.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error computing daily earnings: %s", e)
            raise RepositoryException(f"Failed to compute daily earnings: {e}") from e

        return [
            {"lesson_date": day, "lessons_count": int(count), "daily_earnings": _money(total)}
            for day, count, total in rows
        ]

    def monthly(self, instructor_user_id: str, since: date) -> List[Dict[str, Any]]:
        if self.dialect_name == "postgresql":
            month = func.to_char(InstructorEarnings.lesson_date, "YYYY-MM")
        else:
            month = func.strftime("%Y-%m", InstructorEarnings.lesson_date)
        try:
            rows = (
                self.db.query(
                    month.label("month"),
                    func.count(InstructorEarnings.id),
                    func.sum(InstructorEarnings.net_earnings),
                )
                .filter(*self._paid(instructor_user_id, since))
                .group_by(month)
                .order_by(month.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error computing monthly earnings: %s", e)
            raise RepositoryException(f"Failed to compute monthly earnings: {e}") from e

        return [
            {"month": bucket, "lessons": int(count), "earnings": _money(total)}
            for bucket, count, total in rows
        ]

    def _with_learner(self) -> Query:
        learner = aliased(User)
        return (
            self.db.query(InstructorEarnings, learner.name, learner.email, Booking)
            .join(Booking, Booking.id == InstructorEarnings.booking_id)
            .join(learner, learner.id == Booking.learner_user_id)
        )

    def recent_transactions(self, instructor_user_id: str, limit: int) -> List[Dict[str, Any]]:
        try:
            rows = (
                self._with_learner()
                .filter(InstructorEarnings.instructor_user_id == instructor_user_id)
                .order_by(InstructorEarnings.lesson_date.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error listing recent transactions: %s", e)
            raise RepositoryException(f"Failed to list transactions: {e}") from e

        return [
            {**self.to_dict(earnings), "student_name": name, "student_email": email}
            for earnings, name, email, _booking in rows
        ]

    def report_rows(
        self, instructor_user_id: str, start_date: date, end_date: date
    ) -> List[Dict[str, Any]]:
        learner = aliased(User)
        try:
            rows = (
                self.db.query(
                    InstructorEarnings,
                    learner.name,
                    learner.email,
                    Booking.session_plan,
                    Booking.time_slot,
                    StudentProgress.performance_rating,
                    StudentProgress.driving_hours_logged,
                )
                .join(Booking, Booking.id == InstructorEarnings.booking_id)
                .join(learner, learner.id == Booking.learner_user_id)
                .outerjoin(
                    StudentProgress,
                    StudentProgress.booking_id == InstructorEarnings.booking_id,
                )
                .filter(
                    InstructorEarnings.instructor_user_id == instructor_user_id,
                    InstructorEarnings.lesson_date.between(start_date, end_date),
                )
                .order_by(InstructorEarnings.lesson_date.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error building earnings report: %s", e)
            raise RepositoryException(f"Failed to build earnings report: {e}") from e

        return [
            {
                **self.to_dict(earnings),
                "student_name": name,
                "student_email": email,
                "session_plan": session_plan,
                "time_slot": time_slot,
                "performance_rating": rating,
                "driving_hours_logged": float(hours) if hours is not None else None,
            }
            for earnings, name, email, session_plan, time_slot, rating, hours in rows
        ]

    def payment_methods(self, instructor_user_id: str) -> List[Dict[str, Any]]:
        method = case(
            (InstructorEarnings.razorpay_payment_id.isnot(None), "Razorpay"),
            else_="Other",
        )
        try:
            rows = (
                self.db.query(
                    method.label("payment_method"),
                    func.count(InstructorEarnings.id),
                    func.sum(InstructorEarnings.net_earnings),
                )
                .filter(*self._paid(instructor_user_id, None))
                .group_by(method)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error computing payment methods: %s", e)
            raise RepositoryException(f"Failed to compute payment analytics: {e}") from e

        return [
            {
                "payment_method": name,
                "transaction_count": int(count),
                "total_earnings": _money(total),
            }
            for name, count, total in rows
        ]

    def peak_hours(self, instructor_user_id: str) -> List[Dict[str, Any]]:
        lesson_count = func.count(InstructorEarnings.id)
        try:
            rows = (
                self.db.query(
                    Booking.time_slot,
                    lesson_count,
                    func.avg(InstructorEarnings.net_earnings),
                )
                .join(Booking, Booking.id == InstructorEarnings.booking_id)
                .filter(*self._paid(instructor_user_id, None))
                .group_by(Booking.time_slot)
                .order_by(lesson_count.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error computing peak hours: %s", e)
            raise RepositoryException(f"Failed to compute payment analytics: {e}") from e

        return [
            {"time_slot": slot, "lesson_count": int(count), "avg_earnings": round(_money(avg), 2)}
            for slot, count, avg in rows
        ]

    def top_students(self, instructor_user_id: str, limit: int) -> List[Dict[str, Any]]:
        learner = aliased(User)
        lessons_taken = func.count(InstructorEarnings.id)
        try:
            rows = (
                self.db.query(
                    learner.id,
                    learner.name,
                    lessons_taken,
                    func.sum(InstructorEarnings.net_earnings),
                    func.min(InstructorEarnings.lesson_date),
                    func.max(InstructorEarnings.lesson_date),
                )
                .join(Booking, Booking.id == InstructorEarnings.booking_id)
                .join(learner, learner.id == Booking.learner_user_id)
                .filter(*self._paid(instructor_user_id, None))
                .group_by(learner.id, learner.name)
                .order_by(lessons_taken.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error computing top students: %s", e)
            raise RepositoryException(f"Failed to compute payment analytics: {e}") from e

        return [
            {
                "student_id": student_id,
                "student_name": name,
                "lessons_taken": int(count),
                "total_paid": _money(total),
                "first_lesson": first,
                "last_lesson": last,
            }
            for student_id, name, count, total, first, last in rows
        ]

    def pending(self, instructor_user_id: str) -> List[Dict[str, Any]]:
        try:
            rows = (
                self._with_learner()
                .filter(
                    InstructorEarnings.instructor_user_id == instructor_user_id,
                    InstructorEarnings.payment_status == PaymentStatus.PENDING.value,
                )
                .order_by(InstructorEarnings.lesson_date.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error listing pending payments: %s", e)
            raise RepositoryException(f"Failed to list pending payments: {e}") from e

        return [
            {**self.to_dict(earnings), "student_name": name, "session_plan": booking.session_plan}
            for earnings, name, _email, booking in rows
        ]

    @staticmethod
    def to_dict(earnings: InstructorEarnings) -> Dict[str, Any]:
        return {
            "id": earnings.id,
            "instructor_user_id": earnings.instructor_user_id,
            "booking_id": earnings.booking_id,
            "lesson_date": earnings.lesson_date,
            "amount_earned": _money(earnings.amount_earned),
            "platform_fee": _money(earnings.platform_fee),
            "net_earnings": _money(earnings.net_earnings),
            "razorpay_payment_id": earnings.razorpay_payment_id,
            "payment_status": earnings.payment_status,
            "payment_date": earnings.payment_date,
        }
