"""
Central export point for all dependencies.
"""

from .auth import ensure_instructor, get_current_user
from .database import get_db
from .services import (
    get_auth_service,
    get_booking_service,
    get_device_service,
    get_earnings_service,
    get_instructor_service,
    get_notification_service,
    get_payment_service,
    get_progress_service,
    get_push_notification_service,
)

__all__ = [
    # Auth
    "get_current_user",
    "ensure_instructor",
    # Database
    "get_db",
    # Services
    "get_auth_service",
    "get_booking_service",
    "get_device_service",
    "get_earnings_service",
    "get_instructor_service",
    "get_notification_service",
    "get_payment_service",
    "get_progress_service",
    "get_push_notification_service",
]
