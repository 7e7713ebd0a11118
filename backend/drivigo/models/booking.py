# backend/drivigo/models/booking.py
"""
Booking model for the Drivigo platform.

A booking row is written only after the payment gateway signature has been
verified, so every row corresponds to a captured payment.
"""

from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    COMPLETED = "completed"


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    learner_user_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    instructor_user_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    session_plan = Column(String(20), nullable=False)
    start_date = Column(Date, nullable=False)
    time_slot = Column(String(11), nullable=False)
    razorpay_order_id = Column(String(64), nullable=True)
    razorpay_payment_id = Column(String(64), nullable=True, unique=True)
    amount = Column(Numeric(10, 2), nullable=True)
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    learner = relationship("User", foreign_keys=[learner_user_id])
    instructor = relationship("User", foreign_keys=[instructor_user_id])

    __table_args__ = (
        CheckConstraint("status IN ('confirmed', 'completed')", name="ck_bookings_status"),
        Index("ix_bookings_instructor_status_date", "instructor_user_id", "status", "start_date"),
        Index("ix_bookings_learner_status_date", "learner_user_id", "status", "start_date"),
    )

    def __repr__(self) -> str:
        return f"<Booking {self.id} {self.start_date} {self.time_slot} {self.status}>"
