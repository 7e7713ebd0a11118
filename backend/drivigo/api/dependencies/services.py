# backend/drivigo/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Each factory builds a request-scoped service on the request's session.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.auth_service import AuthService
from ...services.booking_service import BookingService
from ...services.device_service import DeviceService
from ...services.earnings_service import EarningsService
from ...services.instructor_service import InstructorService
from ...services.notification_service import NotificationService
from ...services.payment_service import PaymentService
from ...services.progress_service import ProgressService
from ...services.push_notification_service import PushNotificationService
from .database import get_db

logger = logging.getLogger(__name__)


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_instructor_service(db: Session = Depends(get_db)) -> InstructorService:
    return InstructorService(db)


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    return PaymentService(db)


def get_earnings_service(db: Session = Depends(get_db)) -> EarningsService:
    return EarningsService(db)


def get_push_notification_service(db: Session = Depends(get_db)) -> PushNotificationService:
    return PushNotificationService(db)


def get_notification_service(
    db: Session = Depends(get_db),
    push_service: PushNotificationService = Depends(get_push_notification_service),
) -> NotificationService:
    """
    Get notification service instance.

    Email and SMS gateways read their credentials from settings.
    """
    return NotificationService(db, push_service=push_service)


def get_booking_service(
    db: Session = Depends(get_db),
    payment_service: PaymentService = Depends(get_payment_service),
    notification_service: NotificationService = Depends(get_notification_service),
    earnings_service: EarningsService = Depends(get_earnings_service),
) -> BookingService:
    """
    Get booking service instance with all dependencies.

    Args:
        db: Database session
        payment_service: Razorpay order and signature handling
        notification_service: Confirmation notifications
        earnings_service: Instructor earnings ledger

    Returns:
        BookingService instance
    """
    return BookingService(
        db,
        payment_service=payment_service,
        notification_service=notification_service,
        earnings_service=earnings_service,
    )


def get_progress_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> ProgressService:
    return ProgressService(db, notification_service)


def get_device_service(db: Session = Depends(get_db)) -> DeviceService:
    return DeviceService(db)
