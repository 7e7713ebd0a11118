# backend/drivigo/models/__init__.py
"""
Database models for the Drivigo platform.

Importing this package registers every mapper on ``Base.metadata``.
"""

from .booking import Booking, BookingStatus
from .earnings import InstructorEarnings, PaymentStatus
from .instructor import InstructorAvailability, InstructorProfile
from .notification import Notification, NotificationTemplate, PushSubscription, UserDevice
from .progress import StudentProgress
from .user import User, UserRole

__all__ = [
    "User",
    "UserRole",
    "InstructorProfile",
    "InstructorAvailability",
    "Booking",
    "BookingStatus",
    "Notification",
    "NotificationTemplate",
    "PushSubscription",
    "UserDevice",
    "StudentProgress",
    "InstructorEarnings",
    "PaymentStatus",
]
