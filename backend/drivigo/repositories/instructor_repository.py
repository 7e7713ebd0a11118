# backend/drivigo/repositories/instructor_repository.py
"""
Instructor profile repository.

Handles profile reads/writes and the discovery query that matches instructors
by weekly availability and distance from the learner.
"""

from dataclasses import dataclass
import math
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.constants import EARTH_RADIUS_METERS
from ..core.exceptions import RepositoryException
from ..models.instructor import InstructorAvailability, InstructorProfile
from ..models.user import User
from .base_repository import BaseRepository


def haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two WGS84 points in meters."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(a)))


@dataclass
class InstructorMatch:
    id: str
    user_id: str
    instructor_email: str
    name: Optional[str]
    car_model: Optional[str]
    distance_m: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "instructor_email": self.instructor_email,
            "name": self.name,
            "car_model": self.car_model,
            "distance_m": round(self.distance_m, 1),
        }


class InstructorProfileRepository(BaseRepository[InstructorProfile]):
    def __init__(self, db: Session):
        super().__init__(db, InstructorProfile)

    def get_by_user_id(self, user_id: str) -> Optional[InstructorProfile]:
        return self.find_one_by(user_id=user_id)

    def upsert_for_user(
        self,
        user_id: str,
        *,
        car_model: Optional[str],
        photo_url: Optional[str],
        phone_number: Optional[str],
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> InstructorProfile:
        """
        Insert or update the profile of ``user_id``.

        The service point is only replaced when a new one is supplied, so a failed
        geocode keeps the previous area.
        """
        profile = self.get_by_user_id(user_id)
        if profile is None:
            return self.create(
                user_id=user_id,
                car_model=car_model,
                photo_url=photo_url,
                phone_number=phone_number,
                service_latitude=latitude,
                service_longitude=longitude,
            )

        profile.car_model = car_model
        profile.photo_url = photo_url
        profile.phone_number = phone_number
        if latitude is not None and longitude is not None:
            profile.service_latitude = latitude
            profile.service_longitude = longitude
        self.db.flush()
        return profile

    def find_available_near(
        self,
        *,
        day_of_week: str,
        time_slot: str,
        latitude: float,
        longitude: float,
        radius_meters: float,
    ) -> List[InstructorMatch]:
        """
        Instructors free on ``day_of_week``/``time_slot`` whose service point is
        within ``radius_meters`` of the given location, nearest first.
        """
        if self.dialect_name == "postgresql":
            return self._find_available_near_postgis(
                day_of_week, time_slot, latitude, longitude, radius_meters
            )
        return self._find_available_near_portable(
            day_of_week, time_slot, latitude, longitude, radius_meters
        )

    def _find_available_near_postgis(
        self,
        day_of_week: str,
        time_slot: str,
        latitude: float,
        longitude: float,
        radius_meters: float,
    ) -> List[InstructorMatch]:
        query = text(
            """
            WITH learner_point AS (
                SELECT ST_SetSRID(ST_MakePoint(:lng, :lat), 4326)::geography AS geom
            ), instructor_point AS (
                SELECT
                    ip.id,
                    ip.user_id,
                    ip.car_model,
                    ST_SetSRID(
                        ST_MakePoint(ip.service_longitude, ip.service_latitude), 4326
                    )::geography AS geom
                FROM instructor_profiles ip
                WHERE ip.service_latitude IS NOT NULL
                  AND ip.service_longitude IS NOT NULL
            )
            SELECT DISTINCT
                ipt.id,
                ipt.user_id,
                ipt.car_model,
                u.email AS instructor_email,
                u.name,
                ST_Distance(ipt.geom, lp.geom) AS distance_m
            FROM instructor_point ipt
            JOIN users u ON u.id = ipt.user_id
            JOIN instructor_availability ia ON ia.instructor_id = ipt.id
            CROSS JOIN learner_point lp
            WHERE ia.day_of_week = :day
              AND ia.time_slot = :slot
              AND ST_DWithin(ipt.geom, lp.geom, :radius)
            ORDER BY distance_m
            """
        )
        try:
            result = self.db.execute(
                query,
                {
                    "lng": longitude,
                    "lat": latitude,
                    "day": day_of_week,
                    "slot": time_slot,
                    "radius": radius_meters,
                },
            )
        except SQLAlchemyError as e:
            self.logger.error("Instructor radius search failed: %s", e)
            raise RepositoryException(f"Failed to search instructors: {e}") from e

        return [
            InstructorMatch(
                id=row.id,
                user_id=row.user_id,
                instructor_email=row.instructor_email,
                name=row.name,
                car_model=row.car_model,
                distance_m=float(row.distance_m),
            )
            for row in result
        ]

    def _find_available_near_portable(
        self,
        day_of_week: str,
        time_slot: str,
        latitude: float,
        longitude: float,
        radius_meters: float,
    ) -> List[InstructorMatch]:
        try:
            rows = (
                self.db.query(InstructorProfile, User)
                .join(User, User.id == InstructorProfile.user_id)
                .join(
                    InstructorAvailability,
                    InstructorAvailability.instructor_id == InstructorProfile.id,
                )
                .filter(
                    InstructorAvailability.day_of_week == day_of_week,
                    InstructorAvailability.time_slot == time_slot,
                    InstructorProfile.service_latitude.isnot(None),
                    InstructorProfile.service_longitude.isnot(None),
                )
                .distinct()
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Instructor availability search failed: %s", e)
            raise RepositoryException(f"Failed to search instructors: {e}") from e

        matches: List[InstructorMatch] = []
        for profile, user in rows:
            distance = haversine_meters(
                latitude, longitude, profile.service_latitude, profile.service_longitude
            )
            if distance <= radius_meters:
                matches.append(
                    InstructorMatch(
                        id=profile.id,
                        user_id=user.id,
                        instructor_email=user.email,
                        name=user.name,
                        car_model=profile.car_model,
                        distance_m=distance,
                    )
                )
        matches.sort(key=lambda match: match.distance_m)
        return matches
