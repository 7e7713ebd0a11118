# backend/drivigo/repositories/factory.py
"""
Repository Factory for the Drivigo platform.

Centralizes repository creation so services build their data access the same
way everywhere.
"""

from sqlalchemy.orm import Session

from .availability_repository import AvailabilityRepository
from .booking_repository import BookingRepository
from .device_repository import DeviceRepository
from .earnings_repository import EarningsRepository
from .instructor_repository import InstructorProfileRepository
from .notification_repository import NotificationRepository
from .progress_repository import ProgressRepository
from .user_repository import UserRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_user_repository(db: Session) -> UserRepository:
        return UserRepository(db)

    @staticmethod
    def create_instructor_profile_repository(db: Session) -> InstructorProfileRepository:
        return InstructorProfileRepository(db)

    @staticmethod
    def create_availability_repository(db: Session) -> AvailabilityRepository:
        return AvailabilityRepository(db)

    @staticmethod
    def create_booking_repository(db: Session) -> BookingRepository:
        return BookingRepository(db)

    @staticmethod
    def create_notification_repository(db: Session) -> NotificationRepository:
        return NotificationRepository(db)

    @staticmethod
    def create_device_repository(db: Session) -> DeviceRepository:
        return DeviceRepository(db)

    @staticmethod
    def create_progress_repository(db: Session) -> ProgressRepository:
        return ProgressRepository(db)

    @staticmethod
    def create_earnings_repository(db: Session) -> EarningsRepository:
        return EarningsRepository(db)
