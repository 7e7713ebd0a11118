from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from drivigo.core.exceptions import InvalidPaymentSignatureException, ValidationException
from drivigo.models.booking import Booking
from drivigo.models.earnings import InstructorEarnings
from drivigo.services.booking_service import BookingService
from drivigo.services.earnings_service import EarningsService
from drivigo.services.payment_service import PaymentService, compute_payment_signature


def _payment(instructor, **overrides):
    payment = {
        "razorpay_order_id": "order_1",
        "razorpay_payment_id": "pay_1",
        "razorpay_signature": compute_payment_signature("order_1", "pay_1", "rzp_test_secret"),
        "instructor_user_id": instructor.id,
        "session_plan": "14-day",
        "start_date": date(2030, 1, 7),
        "time_slot": "08:00-09:00",
    }
    payment.update(overrides)
    return payment


def _service(db, notification_service=None):
    return BookingService(
        db,
        payment_service=PaymentService(db, client=MagicMock()),
        notification_service=notification_service,
        earnings_service=EarningsService(db),
    )


@pytest.mark.asyncio
async def test_notification_failure_keeps_booking(db, learner, instructor):
    notifications = MagicMock()
    notifications.send_notification = AsyncMock(side_effect=RuntimeError("smtp down"))
    service = _service(db, notifications)

    booking_id = await service.confirm_payment(learner.id, **_payment(instructor))

    booking = db.get(Booking, booking_id)
    assert booking.amount == 500
    assert booking.session_plan == "14-day"
    notifications.send_notification.assert_awaited_once()
    args = notifications.send_notification.await_args.args
    assert args[0] == learner.id
    assert args[2]["instructor_name"] == "Ravi Instructor"
    assert args[2]["instructor_phone"] == "+919800000001"
    assert args[3] == ["push", "email"]
    assert db.query(InstructorEarnings).filter_by(booking_id=booking_id).count() == 1


@pytest.mark.parametrize(
    "overrides, error",
    [
        ({"razorpay_signature": "0" * 64}, InvalidPaymentSignatureException),
        ({"razorpay_signature": None}, InvalidPaymentSignatureException),
        ({"session_plan": "30-day"}, ValidationException),
        ({"time_slot": "03:00-04:00"}, ValidationException),
    ],
)
def test_rejected_bookings_write_nothing(db, learner, instructor, overrides, error):
    service = _service(db)

    with pytest.raises(error):
        service.create_confirmed_booking(
            learner_user_id=learner.id, **_payment(instructor, **overrides)
        )

    assert db.query(Booking).count() == 0


def test_booking_with_learner_as_instructor_is_rejected(db, learner, instructor):
    service = _service(db)

    with pytest.raises(ValidationException, match="Instructor not found"):
        service.create_confirmed_booking(
            learner_user_id=learner.id, **_payment(instructor, instructor_user_id=learner.id)
        )


@pytest.mark.asyncio
async def test_replayed_payment_skips_side_effects(db, learner, instructor):
    notifications = MagicMock()
    notifications.send_notification = AsyncMock()
    service = _service(db, notifications)

    first = await service.confirm_payment(learner.id, **_payment(instructor))
    second = await service.confirm_payment(learner.id, **_payment(instructor))

    assert second == first
    assert db.query(Booking).count() == 1
    notifications.send_notification.assert_awaited_once()
    assert db.query(InstructorEarnings).count() == 1
