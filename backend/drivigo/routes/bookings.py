# backend/drivigo/routes/bookings.py
"""
Booking read routes.

Endpoints:
    GET /learner/bookings        → Caller's confirmed bookings as learner
    GET /booking/{booking_id}    → One booking with both parties' emails
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends

from ..api.dependencies.auth import get_current_user
from ..api.dependencies.services import get_booking_service
from ..core.exceptions import DomainException, handle_domain_exception
from ..models.user import User
from ..schemas.booking import BookingDetailResponse, LearnerBookingResponse
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bookings"])


@router.get("/learner/bookings", response_model=List[LearnerBookingResponse])
async def list_learner_bookings(
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[LearnerBookingResponse]:
    rows = await asyncio.to_thread(booking_service.list_learner_bookings, current_user.id)
    return [LearnerBookingResponse(**row) for row in rows]


@router.get("/booking/{booking_id}", response_model=BookingDetailResponse)
async def get_booking_details(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingDetailResponse:
    try:
        detail = await asyncio.to_thread(booking_service.get_booking_details, booking_id)
    except DomainException as exc:
        handle_domain_exception(exc)
    return BookingDetailResponse(**detail)
