"""Schemas for instructor discovery, profile and availability."""

from datetime import date
from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictRequestModel
from .base import StandardizedModel


class Location(StrictRequestModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class FindInstructorsRequest(StrictRequestModel):
    startDate: date
    timeSlot: str
    location: Location


class InstructorMatchResponse(StandardizedModel):
    id: str
    car_model: Optional[str] = None
    instructor_email: str
    user_id: str
    name: Optional[str] = None
    distance_m: float


class InstructorProfileResponse(StandardizedModel):
    name: Optional[str] = None
    email: str
    photo_url: Optional[str] = None
    car_model: Optional[str] = None
    phone_number: Optional[str] = None
    service_latitude: Optional[float] = None
    service_longitude: Optional[float] = None


class InstructorProfileUpdate(StrictRequestModel):
    name: Optional[str] = Field(default=None, max_length=255)
    car_model: Optional[str] = Field(default=None, max_length=255)
    photo_url: Optional[str] = Field(default=None, max_length=1024)
    phone_number: Optional[str] = Field(default=None, max_length=32)
    service_address: Optional[str] = Field(default=None, max_length=500)


class AvailabilitySlot(StrictRequestModel):
    day: str
    slot: str


class AvailabilityUpdateRequest(StrictRequestModel):
    availability: List[AvailabilitySlot] = Field(default_factory=list)


class AvailabilityResponse(StandardizedModel):
    day_of_week: str
    time_slot: str
