# backend/drivigo/routes/instructors.py
"""
Instructor routes.

Endpoints:
    POST /instructors/find           → Learner search by day, slot and location
    GET /instructor/profile          → Caller's profile
    PUT /instructor/profile          → Update profile, geocoding the service address
    GET /instructor/availability     → Caller's weekly slots
    PUT /instructor/availability     → Replace the weekly slots
    GET /instructor/bookings         → Caller's confirmed bookings
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends

from ..api.dependencies.auth import get_current_user
from ..api.dependencies.services import get_booking_service, get_instructor_service
from ..core.exceptions import DomainException, handle_domain_exception
from ..models.user import User
from ..schemas.base import MessageResponse
from ..schemas.booking import InstructorBookingResponse
from ..schemas.instructor import (
    AvailabilityResponse,
    AvailabilityUpdateRequest,
    FindInstructorsRequest,
    InstructorMatchResponse,
    InstructorProfileResponse,
    InstructorProfileUpdate,
)
from ..services.booking_service import BookingService
from ..services.instructor_service import InstructorService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["instructors"])


@router.post("/instructors/find", response_model=List[InstructorMatchResponse])
async def find_instructors(
    payload: FindInstructorsRequest,
    instructor_service: InstructorService = Depends(get_instructor_service),
) -> List[InstructorMatchResponse]:
    """Instructors free at the requested weekday and slot within the search radius."""
    try:
        matches = await asyncio.to_thread(
            instructor_service.find_available_instructors,
            payload.startDate,
            payload.timeSlot,
            payload.location.latitude,
            payload.location.longitude,
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    return [InstructorMatchResponse(**match) for match in matches]


@router.get("/instructor/profile", response_model=InstructorProfileResponse)
async def get_profile(
    current_user: User = Depends(get_current_user),
    instructor_service: InstructorService = Depends(get_instructor_service),
) -> InstructorProfileResponse:
    try:
        profile = await asyncio.to_thread(instructor_service.get_profile, current_user.id)
    except DomainException as exc:
        handle_domain_exception(exc)
    return InstructorProfileResponse(**profile)


@router.put("/instructor/profile", response_model=MessageResponse)
async def update_profile(
    payload: InstructorProfileUpdate,
    current_user: User = Depends(get_current_user),
    instructor_service: InstructorService = Depends(get_instructor_service),
) -> MessageResponse:
    """
    Update the caller's name and profile.

    The service address is geocoded first; when nothing matches the stored
    service point is left untouched.
    """
    location = await instructor_service.geocode_service_address(payload.service_address)
    try:
        await asyncio.to_thread(
            instructor_service.update_profile,
            current_user.id,
            name=payload.name,
            car_model=payload.car_model,
            photo_url=payload.photo_url,
            phone_number=payload.phone_number,
            location=location,
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    return MessageResponse(message="Profile updated successfully!")


@router.get("/instructor/availability", response_model=List[AvailabilityResponse])
async def get_availability(
    current_user: User = Depends(get_current_user),
    instructor_service: InstructorService = Depends(get_instructor_service),
) -> List[AvailabilityResponse]:
    rows = await asyncio.to_thread(instructor_service.get_availability, current_user.id)
    return [AvailabilityResponse(**row) for row in rows]


@router.put("/instructor/availability", response_model=MessageResponse)
async def update_availability(
    payload: AvailabilityUpdateRequest,
    current_user: User = Depends(get_current_user),
    instructor_service: InstructorService = Depends(get_instructor_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(
            instructor_service.replace_availability,
            current_user.id,
            [(item.day, item.slot) for item in payload.availability],
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    return MessageResponse(message="Availability updated successfully!")


@router.get("/instructor/bookings", response_model=List[InstructorBookingResponse])
async def list_instructor_bookings(
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[InstructorBookingResponse]:
    rows = await asyncio.to_thread(booking_service.list_instructor_bookings, current_user.id)
    return [InstructorBookingResponse(**row) for row in rows]
