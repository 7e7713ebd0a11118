# backend/drivigo/repositories/__init__.py
"""
Repository layer for the Drivigo platform.

Usage:
    from drivigo.repositories import RepositoryFactory

    bookings = RepositoryFactory.create_booking_repository(db)
    rows = bookings.list_confirmed_for_learner(user_id)
"""

from .availability_repository import AvailabilityRepository
from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .device_repository import DeviceRepository
from .earnings_repository import EarningsRepository
from .factory import RepositoryFactory
from .instructor_repository import InstructorProfileRepository
from .notification_repository import NotificationRepository
from .progress_repository import ProgressRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "RepositoryFactory",
    "UserRepository",
    "InstructorProfileRepository",
    "AvailabilityRepository",
    "BookingRepository",
    "NotificationRepository",
    "DeviceRepository",
    "ProgressRepository",
    "EarningsRepository",
]
