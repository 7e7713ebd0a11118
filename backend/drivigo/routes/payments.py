# backend/drivigo/routes/payments.py
"""
Payment routes - Razorpay checkout.

Endpoints:
    POST /payment/create-order    → Create a gateway order for one booking
    POST /payment/verify          → Verify the checkout signature and book
"""

import asyncio
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..api.dependencies.auth import get_current_user
from ..api.dependencies.services import get_booking_service, get_payment_service
from ..core.exceptions import DomainException, handle_domain_exception
from ..models.user import User
from ..schemas.booking import VerifyPaymentRequest, VerifyPaymentResponse
from ..services.booking_service import BookingService
from ..services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payment", tags=["payments"])


@router.post("/create-order")
async def create_order(
    current_user: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service),
) -> Dict[str, Any]:
    """Return the gateway's order JSON unchanged."""
    try:
        return await asyncio.to_thread(payment_service.create_order)
    except DomainException as exc:
        handle_domain_exception(exc)


@router.post("/verify", response_model=VerifyPaymentResponse)
async def verify_payment(
    payload: VerifyPaymentRequest,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> VerifyPaymentResponse:
    """
    Verify the Razorpay signature and create the booking for the caller.

    Raises:
        HTTPException: 400 "Invalid signature sent!" when the signature does
            not match; no booking is written in that case
    """
    booking_data = payload.bookingData
    try:
        booking_id = await booking_service.confirm_payment(
            current_user.id,
            razorpay_order_id=payload.razorpay_order_id,
            razorpay_payment_id=payload.razorpay_payment_id,
            razorpay_signature=payload.razorpay_signature,
            instructor_user_id=booking_data.instructor_user_id,
            session_plan=booking_data.session_plan,
            start_date=booking_data.start_date,
            time_slot=booking_data.time_slot,
        )
    except DomainException as exc:
        handle_domain_exception(exc)

    return VerifyPaymentResponse(
        message="Payment verified and booking created successfully!",
        bookingId=booking_id,
    )
