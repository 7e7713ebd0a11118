# backend/tests/conftest.py
"""
Pytest configuration.

Every test gets a fresh in-memory SQLite database; routes are pointed at it
through dependency overrides. External gateways are never reached: Razorpay,
web push, Twilio and Resend are either unconfigured or patched per test.
"""

import os

# Set test configuration BEFORE any drivigo imports
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "rzp_test_secret"
os.environ["INTERNAL_API_KEY"] = "internal-test-key"
os.environ["EMAIL_PROVIDER"] = "console"
os.environ["SMS_ENABLED"] = "false"
os.environ["VAPID_PUBLIC_KEY"] = ""
os.environ["VAPID_PRIVATE_KEY"] = ""
os.environ["MAPBOX_ACCESS_TOKEN"] = ""

from typing import Iterator

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from drivigo import models  # noqa: F401  # register mappers
from drivigo.api.dependencies.database import get_db, get_session_factory
from drivigo.core.constants import (
    TEMPLATE_BOOKING_CONFIRMATION,
    TEMPLATE_LESSON_COMPLETION,
    TEMPLATE_LESSON_REMINDER,
)
from drivigo.database import Base
from drivigo.main import fastapi_app as app
from drivigo.models.notification import NotificationTemplate
from drivigo.models.user import User

from .factories.builders import create_instructor, create_user


@pytest.fixture
def engine() -> Iterator[Engine]:
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture
def db(session_factory: sessionmaker) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db: Session, session_factory: sessionmaker) -> Iterator[TestClient]:
    def override_get_db() -> Iterator[Session]:
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def learner(db: Session) -> User:
    return create_user(
        db, "learner@example.com", name="Asha Learner", phone_number="+919811111111"
    )


@pytest.fixture
def instructor(db: Session) -> User:
    return create_instructor(
        db,
        "instructor@example.com",
        name="Ravi Instructor",
        slots=(("Monday", "08:00-09:00"),),
    )


@pytest.fixture
def templates(db: Session) -> None:
    db.add_all(
        [
            NotificationTemplate(
                template_name=TEMPLATE_BOOKING_CONFIRMATION,
                subject="Booking confirmed with {{instructor_name}}",
                content=(
                    "Hi {{student_name}}, your lesson on {{lesson_date}} at {{lesson_time}} "
                    "is confirmed."
                ),
            ),
            NotificationTemplate(
                template_name=TEMPLATE_LESSON_REMINDER,
                subject=None,
                content=(
                    "Reminder. Your lesson at {{lesson_time}} with {{instructor_name}} "
                    "is tomorrow."
                ),
            ),
            NotificationTemplate(
                template_name=TEMPLATE_LESSON_COMPLETION,
                subject="Lesson complete",
                content="Great job {{student_name}}! Your progress has been recorded.",
            ),
        ]
    )
    db.commit()
