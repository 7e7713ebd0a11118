"""Builders for test data; each helper commits so routes see the rows."""

from datetime import date
import itertools
from typing import Dict, Optional

from sqlalchemy.orm import Session

from drivigo.auth import create_access_token, get_password_hash
from drivigo.models.booking import Booking, BookingStatus
from drivigo.models.instructor import InstructorAvailability, InstructorProfile
from drivigo.models.user import User, UserRole

TEST_PASSWORD = "Test1234!"

_payment_ids = itertools.count(1)

# Bengaluru, MG Road; used as the learner's search point
LEARNER_LAT = 12.9756
LEARNER_LNG = 77.6050


def create_user(
    db: Session,
    email: str,
    role: str = UserRole.LEARNER.value,
    *,
    name: Optional[str] = None,
    phone_number: Optional[str] = None,
    password: str = TEST_PASSWORD,
) -> User:
    user = User(
        email=email,
        password_hash=get_password_hash(password),
        role=role,
        name=name,
        phone_number=phone_number,
    )
    db.add(user)
    db.commit()
    return user


def create_instructor(
    db: Session,
    email: str,
    *,
    name: str = "Instructor",
    latitude: Optional[float] = LEARNER_LAT,
    longitude: Optional[float] = LEARNER_LNG,
    slots: tuple = (),
    car_model: str = "Maruti Swift",
    phone_number: Optional[str] = "+919800000001",
) -> User:
    user = create_user(db, email, UserRole.INSTRUCTOR.value, name=name)
    profile = InstructorProfile(
        user_id=user.id,
        car_model=car_model,
        phone_number=phone_number,
        service_latitude=latitude,
        service_longitude=longitude,
    )
    db.add(profile)
    db.flush()
    for day, slot in slots:
        db.add(InstructorAvailability(instructor_id=profile.id, day_of_week=day, time_slot=slot))
    db.commit()
    return user


def create_booking(
    db: Session,
    learner: User,
    instructor: User,
    *,
    start_date: date = date(2030, 1, 7),
    time_slot: str = "08:00-09:00",
    status: str = BookingStatus.CONFIRMED.value,
) -> Booking:
    booking = Booking(
        learner_user_id=learner.id,
        instructor_user_id=instructor.id,
        session_plan="7-day",
        start_date=start_date,
        time_slot=time_slot,
        razorpay_order_id="order_test",
        razorpay_payment_id=f"pay_test_{next(_payment_ids)}",
        amount=500,
        status=status,
    )
    db.add(booking)
    db.commit()
    return booking


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token({"sub": user.id, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


