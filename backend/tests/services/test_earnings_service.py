from datetime import date
from decimal import Decimal

import pytest

from drivigo.core.exceptions import NotFoundException
from drivigo.models.earnings import InstructorEarnings
from drivigo.models.instructor import InstructorProfile
from drivigo.services.earnings_service import EarningsService
from tests.factories.builders import create_booking


def test_record_earnings_overwrites_same_booking(db, learner, instructor):
    booking = create_booking(db, learner, instructor)
    service = EarningsService(db)

    first = service.record_earnings(
        instructor_user_id=instructor.id,
        booking_id=booking.id,
        lesson_date=booking.start_date,
        amount_earned=500,
    )
    second = service.record_earnings(
        instructor_user_id=instructor.id,
        booking_id=booking.id,
        lesson_date=booking.start_date,
        amount_earned=800,
    )

    assert first["platform_fee"] == 50.0
    assert second == {
        "success": True,
        "earningsId": first["earningsId"],
        "net_earnings": 720.0,
        "platform_fee": 80.0,
    }
    db.expire_all()
    row = db.query(InstructorEarnings).one()
    assert row.payment_status == "paid"
    assert row.payment_date == date.today()
    profile = db.query(InstructorProfile).filter_by(user_id=instructor.id).one()
    assert profile.total_earnings == Decimal("720.00")
    assert profile.total_lessons_taught == 1


def test_period_filters_dashboard(db, learner, instructor):
    service = EarningsService(db)
    old = create_booking(db, learner, instructor, start_date=date(2020, 1, 6))
    service.record_earnings(
        instructor_user_id=instructor.id,
        booking_id=old.id,
        lesson_date=old.start_date,
        amount_earned=500,
    )

    assert service.get_dashboard(instructor.id, "week")["summary"]["total_lessons"] == 0
    assert service.get_dashboard(instructor.id, "all")["summary"]["total_lessons"] == 1


def test_mark_payment_processed_updates_totals(db, learner, instructor):
    booking = create_booking(db, learner, instructor)
    pending = InstructorEarnings(
        instructor_user_id=instructor.id,
        booking_id=booking.id,
        lesson_date=booking.start_date,
        amount_earned=Decimal("500.00"),
        platform_fee=Decimal("50.00"),
        net_earnings=Decimal("450.00"),
        payment_status="pending",
    )
    db.add(pending)
    db.commit()
    service = EarningsService(db)

    assert service.get_pending_payments(instructor.id)["totalPending"] == 450.0

    service.mark_payment_processed(pending.id, date(2030, 1, 10))

    db.expire_all()
    row = db.get(InstructorEarnings, pending.id)
    assert row.payment_status == "paid"
    assert row.payment_date == date(2030, 1, 10)
    profile = db.query(InstructorProfile).filter_by(user_id=instructor.id).one()
    assert profile.total_earnings == Decimal("450.00")
    assert service.get_pending_payments(instructor.id)["pendingPayments"] == []


def test_mark_unknown_payment_processed(db):
    with pytest.raises(NotFoundException):
        EarningsService(db).mark_payment_processed("01HZZZZZZZZZZZZZZZZZZZZZZZ")
