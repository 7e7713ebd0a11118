# backend/drivigo/services/booking_service.py
"""
Booking Service for the Drivigo platform.

A booking is written only after the Razorpay signature checks out. The
confirmation notification and the instructor earnings entry follow; their
failures are logged and never undo the booking.
"""

import asyncio
from datetime import date
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import (
    CHANNEL_EMAIL,
    CHANNEL_PUSH,
    SESSION_PLANS,
    TEMPLATE_BOOKING_CONFIRMATION,
    TIME_SLOTS,
)
from ..core.exceptions import (
    InvalidPaymentSignatureException,
    NotFoundException,
    ValidationException,
)
from ..models.booking import Booking, BookingStatus
from ..models.user import UserRole
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .earnings_service import EarningsService
from .notification_service import NotificationService
from .payment_service import PaymentService

logger = logging.getLogger(__name__)


class BookingService(BaseService):
    def __init__(
        self,
        db: Session,
        payment_service: Optional[PaymentService] = None,
        notification_service: Optional[NotificationService] = None,
        earnings_service: Optional[EarningsService] = None,
    ):
        super().__init__(db)
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.payment_service = payment_service or PaymentService(db)
        self.notification_service = notification_service
        self.earnings_service = earnings_service or EarningsService(db)

    @BaseService.measure_operation("create_confirmed_booking")
    def create_confirmed_booking(
        self,
        *,
        learner_user_id: str,
        razorpay_order_id: str,
        razorpay_payment_id: str,
        razorpay_signature: Optional[str],
        instructor_user_id: str,
        session_plan: str,
        start_date: date,
        time_slot: str,
    ) -> Tuple[Booking, bool]:
        """
        Verify the payment signature and insert the booking.

        The Razorpay payment id is the idempotency key: a replayed callback
        returns the existing booking with ``created`` False.

        Raises:
            InvalidPaymentSignatureException: signature mismatch; nothing is written
            ValidationException: unknown plan, slot or instructor
        """
        if not self.payment_service.verify_signature(
            razorpay_order_id, razorpay_payment_id, razorpay_signature
        ):
            self.logger.warning(
                "Rejected payment with bad signature for order %s", razorpay_order_id
            )
            raise InvalidPaymentSignatureException(razorpay_order_id)

        existing = self.repository.get_by_payment_id(razorpay_payment_id)
        if existing is not None:
            self.logger.info(
                "Payment %s already booked as %s", razorpay_payment_id, existing.id
            )
            return existing, False

        if session_plan not in SESSION_PLANS:
            raise ValidationException(f"Unknown session plan: {session_plan}")
        if time_slot not in TIME_SLOTS:
            raise ValidationException(f"Unknown time slot: {time_slot}")
        instructor = self.user_repository.get_by_id(instructor_user_id)
        if instructor is None or instructor.role != UserRole.INSTRUCTOR.value:
            raise ValidationException("Instructor not found.")

        with self.transaction():
            booking = self.repository.create(
                learner_user_id=learner_user_id,
                instructor_user_id=instructor_user_id,
                session_plan=session_plan,
                start_date=start_date,
                time_slot=time_slot,
                razorpay_order_id=razorpay_order_id,
                razorpay_payment_id=razorpay_payment_id,
                amount=settings.booking_order_amount / 100,
                status=BookingStatus.CONFIRMED.value,
            )
        self.log_operation("booking_confirmed", booking_id=booking.id)
        return booking, True

    @BaseService.measure_operation("confirm_payment")
    async def confirm_payment(self, learner_user_id: str, **payment: Any) -> str:
        """Create the booking, then notify the learner and credit the instructor."""
        booking, created = await asyncio.to_thread(
            self.create_confirmed_booking, learner_user_id=learner_user_id, **payment
        )
        if not created:
            return booking.id
        await self._send_confirmation(booking)
        await asyncio.to_thread(self._record_earnings, booking)
        return booking.id

    def _confirmation_data(self, booking: Booking) -> Dict[str, Any]:
        learner = self.user_repository.get_by_id(booking.learner_user_id)
        instructor = self.user_repository.get_by_id(booking.instructor_user_id)
        profile = instructor.instructor_profile if instructor else None
        return {
            "student_name": (learner.name if learner else None) or "Student",
            "instructor_name": (instructor.name if instructor else None) or "Instructor",
            "lesson_date": booking.start_date.isoformat(),
            "lesson_time": booking.time_slot,
            "car_model": "Available car",
            "instructor_phone": (profile.phone_number if profile else None) or "Available",
        }

    async def _send_confirmation(self, booking: Booking) -> None:
        if self.notification_service is None:
            return
        try:
            data = await asyncio.to_thread(self._confirmation_data, booking)
            await self.notification_service.send_notification(
                booking.learner_user_id,
                TEMPLATE_BOOKING_CONFIRMATION,
                data,
                [CHANNEL_PUSH, CHANNEL_EMAIL],
            )
        except Exception as exc:
            self.logger.error("Booking confirmation for %s failed: %s", booking.id, exc)

    def _record_earnings(self, booking: Booking) -> None:
        try:
            self.earnings_service.record_earnings(
                instructor_user_id=booking.instructor_user_id,
                booking_id=booking.id,
                lesson_date=booking.start_date,
                amount_earned=settings.lesson_price,
                razorpay_payment_id=booking.razorpay_payment_id,
            )
        except Exception as exc:
            self.logger.error("Recording earnings for booking %s failed: %s", booking.id, exc)

    @BaseService.measure_operation("list_instructor_bookings")
    def list_instructor_bookings(self, instructor_user_id: str) -> List[Dict[str, Any]]:
        return self.repository.list_confirmed_for_instructor(instructor_user_id)

    @BaseService.measure_operation("list_learner_bookings")
    def list_learner_bookings(self, learner_user_id: str) -> List[Dict[str, Any]]:
        return self.repository.list_confirmed_for_learner(learner_user_id)

    @BaseService.measure_operation("get_booking_details")
    def get_booking_details(self, booking_id: str) -> Dict[str, Any]:
        detail = self.repository.get_detail(booking_id)
        if detail is None:
            raise NotFoundException("Booking not found.")
        return detail
