# backend/drivigo/models/progress.py
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
import ulid

from ..database import Base


class StudentProgress(Base):
    """Instructor's record of one completed lesson; at most one per booking."""

    __tablename__ = "student_progress"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    learner_user_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    instructor_user_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    booking_id = Column(String(26), ForeignKey("bookings.id"), nullable=False, unique=True)
    lesson_date = Column(Date, nullable=False)
    lesson_type = Column(String(50), nullable=True)
    skills_practiced = Column(JSON, nullable=False, default=list)
    performance_rating = Column(Integer, nullable=True)
    instructor_notes = Column(Text, nullable=True)
    areas_to_improve = Column(JSON, nullable=False, default=list)
    driving_hours_logged = Column(Numeric(5, 2), nullable=False, default=0)
    total_driving_hours = Column(Numeric(7, 2), nullable=False, default=0)
    next_lesson_recommendations = Column(Text, nullable=True)
    lesson_completed = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    booking = relationship("Booking")
    learner = relationship("User", foreign_keys=[learner_user_id])
    instructor = relationship("User", foreign_keys=[instructor_user_id])

    __table_args__ = (
        CheckConstraint(
            "performance_rating IS NULL OR (performance_rating BETWEEN 1 AND 5)",
            name="ck_student_progress_rating",
        ),
    )
