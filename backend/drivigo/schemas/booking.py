"""Schemas for payment verification and booking views."""

from datetime import date
from typing import Optional

from ._strict_base import StrictRequestModel
from .base import StandardizedModel


class BookingData(StrictRequestModel):
    # Accepted for client compatibility; the booking is always made for the caller
    learner_user_id: Optional[str] = None
    instructor_user_id: str
    session_plan: str
    start_date: date
    time_slot: str


class VerifyPaymentRequest(StrictRequestModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
    bookingData: BookingData


class VerifyPaymentResponse(StandardizedModel):
    message: str
    bookingId: str


class InstructorBookingResponse(StandardizedModel):
    id: str
    start_date: date
    time_slot: str
    learner_email: str


class LearnerBookingResponse(StandardizedModel):
    id: str
    start_date: date
    time_slot: str
    session_plan: str
    instructor_email: str
    phone_number: Optional[str] = None
    car_model: Optional[str] = None


class BookingDetailResponse(StandardizedModel):
    id: str
    start_date: date
    time_slot: str
    session_plan: str
    learner_email: str
    instructor_email: str
