from decimal import Decimal
from unittest.mock import patch

from drivigo.core.config import settings
from drivigo.models.booking import Booking
from drivigo.models.earnings import InstructorEarnings
from drivigo.models.instructor import InstructorProfile
from drivigo.models.notification import Notification
from drivigo.services.payment_service import compute_payment_signature
from tests.factories.builders import auth_headers


def _verify_payload(instructor, signature=None, payment_id="pay_001"):
    secret = settings.razorpay_key_secret.get_secret_value()
    return {
        "razorpay_order_id": "order_001",
        "razorpay_payment_id": payment_id,
        "razorpay_signature": signature
        or compute_payment_signature("order_001", payment_id, secret),
        "bookingData": {
            "instructor_user_id": instructor.id,
            "session_plan": "7-day",
            "start_date": "2030-01-07",
            "time_slot": "08:00-09:00",
        },
    }


def test_create_order(client, learner):
    with patch("drivigo.services.payment_service.razorpay.Client") as client_cls:
        client_cls.return_value.order.create.return_value = {
            "id": "order_001",
            "amount": 50000,
            "currency": "INR",
        }
        response = client.post("/api/payment/create-order", headers=auth_headers(learner))

    assert response.status_code == 200
    assert response.json()["id"] == "order_001"


def test_create_order_gateway_error(client, learner):
    with patch("drivigo.services.payment_service.razorpay.Client") as client_cls:
        client_cls.return_value.order.create.side_effect = RuntimeError("boom")
        response = client.post("/api/payment/create-order", headers=auth_headers(learner))

    assert response.status_code == 500
    assert response.json()["detail"] == "Server error while creating order."


def test_verify_creates_booking_notification_and_earnings(
    client, db, learner, instructor, templates
):
    response = client.post(
        "/api/payment/verify", headers=auth_headers(learner), json=_verify_payload(instructor)
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Payment verified and booking created successfully!"

    db.expire_all()
    booking = db.get(Booking, body["bookingId"])
    assert booking.learner_user_id == learner.id
    assert booking.instructor_user_id == instructor.id
    assert booking.status == "confirmed"
    assert booking.razorpay_payment_id == "pay_001"

    notification = db.query(Notification).filter_by(user_id=learner.id).one()
    assert notification.type == "booking_confirmation_email"
    assert notification.title == "Booking confirmed with Ravi Instructor"
    assert "Hi Asha Learner" in notification.message
    assert notification.email_sent_at is not None

    earnings = db.query(InstructorEarnings).filter_by(booking_id=booking.id).one()
    assert earnings.amount_earned == Decimal("500.00")
    assert earnings.platform_fee == Decimal("50.00")
    assert earnings.net_earnings == Decimal("450.00")
    assert earnings.payment_status == "paid"

    profile = db.query(InstructorProfile).filter_by(user_id=instructor.id).one()
    assert profile.total_earnings == Decimal("450.00")
    assert profile.total_lessons_taught == 1


def test_verify_tampered_signature_creates_nothing(client, db, learner, instructor, templates):
    payload = _verify_payload(instructor)
    payload["razorpay_payment_id"] = "pay_other"

    response = client.post("/api/payment/verify", headers=auth_headers(learner), json=payload)

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid signature sent!"
    db.expire_all()
    assert db.query(Booking).count() == 0
    assert db.query(InstructorEarnings).count() == 0
    assert db.query(Notification).count() == 0


def test_verify_without_template_still_books(client, db, learner, instructor):
    response = client.post(
        "/api/payment/verify", headers=auth_headers(learner), json=_verify_payload(instructor)
    )

    assert response.status_code == 200
    db.expire_all()
    assert db.query(Booking).count() == 1
    assert db.query(InstructorEarnings).count() == 1


def test_booking_views(client, learner, instructor, templates):
    booking_id = client.post(
        "/api/payment/verify", headers=auth_headers(learner), json=_verify_payload(instructor)
    ).json()["bookingId"]

    learner_rows = client.get("/api/learner/bookings", headers=auth_headers(learner)).json()
    assert learner_rows == [
        {
            "id": booking_id,
            "start_date": "2030-01-07",
            "time_slot": "08:00-09:00",
            "session_plan": "7-day",
            "instructor_email": "instructor@example.com",
            "phone_number": "+919800000001",
            "car_model": "Maruti Swift",
        }
    ]

    instructor_rows = client.get(
        "/api/instructor/bookings", headers=auth_headers(instructor)
    ).json()
    assert instructor_rows == [
        {
            "id": booking_id,
            "start_date": "2030-01-07",
            "time_slot": "08:00-09:00",
            "learner_email": "learner@example.com",
        }
    ]

    detail = client.get(f"/api/booking/{booking_id}", headers=auth_headers(learner)).json()
    assert detail["learner_email"] == "learner@example.com"
    assert detail["instructor_email"] == "instructor@example.com"


def test_booking_detail_not_found(client, learner):
    response = client.get("/api/booking/01HZZZZZZZZZZZZZZZZZZZZZZZ", headers=auth_headers(learner))
    assert response.status_code == 404
    assert response.json()["detail"] == "Booking not found."


def test_replayed_verify_returns_same_booking(client, db, learner, instructor, templates):
    payload = _verify_payload(instructor)

    first = client.post("/api/payment/verify", headers=auth_headers(learner), json=payload)
    second = client.post("/api/payment/verify", headers=auth_headers(learner), json=payload)

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["bookingId"] == first.json()["bookingId"]

    db.expire_all()
    assert db.query(Booking).count() == 1
    assert db.query(InstructorEarnings).count() == 1
    assert db.query(Notification).filter_by(user_id=learner.id).count() == 1
    profile = db.query(InstructorProfile).filter_by(user_id=instructor.id).one()
    assert profile.total_earnings == Decimal("450.00")
    assert profile.total_lessons_taught == 1
