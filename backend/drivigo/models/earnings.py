# backend/drivigo/models/earnings.py
from enum import Enum

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class PaymentStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"


class InstructorEarnings(Base):
    """Ledger row for one booking: gross amount, platform fee and net payout."""

    __tablename__ = "instructor_earnings"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    instructor_user_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    booking_id = Column(String(26), ForeignKey("bookings.id"), nullable=False, unique=True)
    lesson_date = Column(Date, nullable=False)
    amount_earned = Column(Numeric(10, 2), nullable=False)
    platform_fee = Column(Numeric(10, 2), nullable=False)
    net_earnings = Column(Numeric(10, 2), nullable=False)
    razorpay_payment_id = Column(String(64), nullable=True)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    booking = relationship("Booking")

    __table_args__ = (
        CheckConstraint(
            "payment_status IN ('paid', 'pending')", name="ck_instructor_earnings_status"
        ),
    )
