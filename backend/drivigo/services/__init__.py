"""
Service layer for the Drivigo backend.

Services hold the business logic; routes stay thin and repositories own the
queries.
"""

from .auth_service import AuthService
from .base import BaseService
from .booking_service import BookingService
from .device_service import DeviceService
from .earnings_service import EarningsService
from .email import EmailService
from .instructor_service import InstructorService
from .notification_service import NotificationService
from .payment_service import PaymentService
from .progress_service import ProgressService
from .push_notification_service import PushNotificationService
from .sms_service import SMSService

__all__ = [
    "AuthService",
    "BaseService",
    "BookingService",
    "DeviceService",
    "EarningsService",
    "EmailService",
    "InstructorService",
    "NotificationService",
    "PaymentService",
    "ProgressService",
    "PushNotificationService",
    "SMSService",
]
