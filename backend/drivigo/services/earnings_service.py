# backend/drivigo/services/earnings_service.py
"""
Earnings Service for the Drivigo platform.

Keeps the per-booking earnings ledger (gross, platform fee, net) and the
running totals on the instructor profile, and builds the dashboard, report
and analytics views instructors see.
"""

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import Any, Dict, Optional, Union

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import (
    ANALYTICS_TOP_STUDENTS,
    DASHBOARD_DAILY_LIMIT,
    DASHBOARD_RECENT_TRANSACTIONS,
)
from ..core.exceptions import NotFoundException, ValidationException
from ..models.earnings import InstructorEarnings, PaymentStatus
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

PERIOD_DAYS = {"week": 7, "month": 30, "year": 365}

Money = Union[int, float, Decimal, str]


def split_platform_fee(amount: Money, rate: Optional[float] = None) -> tuple[Decimal, Decimal]:
    """Return ``(platform_fee, net)`` for a gross ``amount``, rounded to paise."""
    gross = Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)
    fee_rate = Decimal(str(settings.platform_fee_rate if rate is None else rate))
    fee = (gross * fee_rate).quantize(CENTS, rounding=ROUND_HALF_UP)
    return fee, gross - fee


def period_start(period: Optional[str], today: Optional[date] = None) -> Optional[date]:
    """First lesson date included for a dashboard period; None means all time."""
    days = PERIOD_DAYS.get((period or "").lower())
    if days is None:
        return None
    return (today or date.today()) - timedelta(days=days)


def _one_year_before(day: date) -> date:
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        return day.replace(year=day.year - 1, day=28)


class EarningsService(BaseService):
    """Service layer for instructor earnings."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_earnings_repository(db)

    @BaseService.measure_operation("record_earnings")
    def record_earnings(
        self,
        *,
        instructor_user_id: str,
        booking_id: str,
        lesson_date: date,
        amount_earned: Money,
        razorpay_payment_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Record a paid lesson; re-recording the same booking overwrites it.

        Returns:
            ``{success, earningsId, net_earnings, platform_fee}``
        """
        fee, net = split_platform_fee(amount_earned)
        with self.transaction():
            earnings = self.repository.upsert_for_booking(
                booking_id,
                instructor_user_id=instructor_user_id,
                lesson_date=lesson_date,
                amount_earned=Decimal(str(amount_earned)).quantize(CENTS),
                platform_fee=fee,
                net_earnings=net,
                razorpay_payment_id=razorpay_payment_id,
                payment_status=PaymentStatus.PAID.value,
                payment_date=date.today(),
            )
            self.repository.refresh_profile_totals(instructor_user_id)

        self.log_operation(
            "earnings_recorded", booking_id=booking_id, instructor_user_id=instructor_user_id
        )
        return {
            "success": True,
            "earningsId": earnings.id,
            "net_earnings": float(net),
            "platform_fee": float(fee),
        }

    @BaseService.measure_operation("mark_payment_processed")
    def mark_payment_processed(
        self, earnings_id: str, payment_date: Optional[date] = None
    ) -> InstructorEarnings:
        with self.transaction():
            earnings = self.repository.update(
                earnings_id,
                payment_status=PaymentStatus.PAID.value,
                payment_date=payment_date or date.today(),
            )
            if earnings is None:
                raise NotFoundException("Earnings record not found.")
            self.repository.refresh_profile_totals(earnings.instructor_user_id)
        return earnings

    @BaseService.measure_operation("get_dashboard")
    def get_dashboard(
        self, instructor_user_id: str, period: Optional[str] = "month"
    ) -> Dict[str, Any]:
        since = period_start(period)
        today = date.today()
        return {
            "success": True,
            "summary": self.repository.summary(instructor_user_id, since),
            "dailyEarnings": self.repository.daily(
                instructor_user_id, since, DASHBOARD_DAILY_LIMIT
            ),
            "recentTransactions": self.repository.recent_transactions(
                instructor_user_id, DASHBOARD_RECENT_TRANSACTIONS
            ),
            "monthlyComparison": self.repository.monthly(
                instructor_user_id, _one_year_before(today)
            ),
        }

    @BaseService.measure_operation("get_report")
    def get_report(
        self,
        instructor_user_id: str,
        start_date: Optional[date],
        end_date: Optional[date],
    ) -> Dict[str, Any]:
        if start_date is None or end_date is None:
            raise ValidationException("Start date and end date are required")
        if start_date > end_date:
            raise ValidationException("Start date must be on or before end date")

        transactions = self.repository.report_rows(instructor_user_id, start_date, end_date)
        statistics = {
            "totalLessons": len(transactions),
            "totalRevenue": round(sum(row["amount_earned"] for row in transactions), 2),
            "totalNetEarnings": round(sum(row["net_earnings"] for row in transactions), 2),
            "totalFees": round(sum(row["platform_fee"] for row in transactions), 2),
            "totalHours": round(
                sum(row["driving_hours_logged"] or 0 for row in transactions), 2
            ),
        }
        return {
            "success": True,
            "report": {
                "period": {"startDate": start_date, "endDate": end_date},
                "statistics": statistics,
                "transactions": transactions,
            },
        }

    @BaseService.measure_operation("get_analytics")
    def get_analytics(self, instructor_user_id: str) -> Dict[str, Any]:
        return {
            "success": True,
            "analytics": {
                "paymentMethods": self.repository.payment_methods(instructor_user_id),
                "peakHours": self.repository.peak_hours(instructor_user_id),
                "topStudents": self.repository.top_students(
                    instructor_user_id, ANALYTICS_TOP_STUDENTS
                ),
            },
        }

    @BaseService.measure_operation("get_pending_payments")
    def get_pending_payments(self, instructor_user_id: str) -> Dict[str, Any]:
        rows = self.repository.pending(instructor_user_id)
        return {
            "success": True,
            "pendingPayments": rows,
            "totalPending": round(sum(row["net_earnings"] for row in rows), 2),
        }
