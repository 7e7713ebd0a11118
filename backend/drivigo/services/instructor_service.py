# backend/drivigo/services/instructor_service.py
"""
Instructor Service for the Drivigo platform.

Profile management (with service-area geocoding), weekly availability and
the learner-facing discovery search.
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import DAYS_OF_WEEK, TIME_SLOTS
from ..core.exceptions import NotFoundException, ValidationException
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .geocoding import GeocodedAddress, GeocodingProvider, MapboxProvider

logger = logging.getLogger(__name__)


def day_name(day: date) -> str:
    """English weekday name for ``day`` (Monday..Sunday)."""
    return DAYS_OF_WEEK[day.weekday()]


class InstructorService(BaseService):
    def __init__(self, db: Session, geocoder: Optional[GeocodingProvider] = None):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.profile_repository = RepositoryFactory.create_instructor_profile_repository(db)
        self.availability_repository = RepositoryFactory.create_availability_repository(db)
        self.geocoder = geocoder or MapboxProvider()

    # Discovery

    @BaseService.measure_operation("find_available_instructors")
    def find_available_instructors(
        self,
        start_date: date,
        time_slot: str,
        latitude: float,
        longitude: float,
    ) -> List[Dict[str, Any]]:
        """
        Instructors free on ``start_date``'s weekday at ``time_slot`` whose service
        point lies within the search radius of the learner, nearest first.
        """
        if time_slot not in TIME_SLOTS:
            raise ValidationException(f"Unknown time slot: {time_slot}")
        matches = self.profile_repository.find_available_near(
            day_of_week=day_name(start_date),
            time_slot=time_slot,
            latitude=latitude,
            longitude=longitude,
            radius_meters=settings.search_radius_meters,
        )
        return [match.to_dict() for match in matches]

    # Profile

    @BaseService.measure_operation("get_profile")
    def get_profile(self, user_id: str) -> Dict[str, Any]:
        user = self.user_repository.get_by_id(user_id)
        if user is None:
            raise NotFoundException("Profile not found.")
        profile = self.profile_repository.get_by_user_id(user_id)
        return {
            "name": user.name,
            "email": user.email,
            "photo_url": profile.photo_url if profile else None,
            "car_model": profile.car_model if profile else None,
            "phone_number": profile.phone_number if profile else None,
            "service_latitude": profile.service_latitude if profile else None,
            "service_longitude": profile.service_longitude if profile else None,
        }

    async def geocode_service_address(self, address: Optional[str]) -> Optional[GeocodedAddress]:
        """Best-effort geocode; errors are logged and treated as no match."""
        if not address:
            return None
        try:
            return await self.geocoder.geocode(address)
        except Exception as exc:
            self.logger.warning("Geocoding service address failed: %s", exc)
            return None

    @BaseService.measure_operation("update_profile")
    def update_profile(
        self,
        user_id: str,
        *,
        name: Optional[str],
        car_model: Optional[str],
        photo_url: Optional[str],
        phone_number: Optional[str],
        location: Optional[GeocodedAddress] = None,
    ) -> None:
        """Update the user's name and upsert the profile; no location keeps the old point."""
        user = self.user_repository.get_by_id(user_id)
        if user is None:
            raise NotFoundException("Profile not found.")

        with self.transaction():
            user.name = name
            self.profile_repository.upsert_for_user(
                user_id,
                car_model=car_model,
                photo_url=photo_url,
                phone_number=phone_number,
                latitude=location.latitude if location else None,
                longitude=location.longitude if location else None,
            )
        self.log_operation("instructor_profile_updated", user_id=user_id)

    # Availability

    @BaseService.measure_operation("get_availability")
    def get_availability(self, user_id: str) -> List[Dict[str, str]]:
        profile = self.profile_repository.get_by_user_id(user_id)
        if profile is None:
            return []
        return [
            {"day_of_week": row.day_of_week, "time_slot": row.time_slot}
            for row in self.availability_repository.list_for_instructor(profile.id)
        ]

    @BaseService.measure_operation("replace_availability")
    def replace_availability(self, user_id: str, slots: Iterable[Tuple[str, str]]) -> int:
        """
        Replace the weekly availability with ``slots`` in one transaction.

        Invalid days or slots are rejected before anything is deleted.
        Duplicate pairs collapse to one row. Returns the number of rows stored.
        """
        unique: List[Tuple[str, str]] = []
        for day, slot in slots:
            if day not in DAYS_OF_WEEK:
                raise ValidationException(f"Invalid day: {day}")
            if slot not in TIME_SLOTS:
                raise ValidationException(f"Invalid time slot: {slot}")
            if (day, slot) not in unique:
                unique.append((day, slot))

        profile = self.profile_repository.get_by_user_id(user_id)
        if profile is None:
            raise NotFoundException("Instructor profile not found.")

        with self.transaction():
            self.availability_repository.delete_for_instructor(profile.id)
            self.availability_repository.bulk_create(profile.id, unique)

        self.log_operation("availability_replaced", user_id=user_id, slots=len(unique))
        return len(unique)
