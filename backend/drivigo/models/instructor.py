# backend/drivigo/models/instructor.py
"""
Instructor profile and weekly availability models.

The service area is stored as a plain latitude/longitude pair. On PostgreSQL
the discovery query builds a PostGIS geography from these columns on the fly,
so no geometry column type is needed in the ORM.
"""

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class InstructorProfile(Base):
    __tablename__ = "instructor_profiles"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    car_model = Column(String(255), nullable=True)
    photo_url = Column(String(1024), nullable=True)
    phone_number = Column(String(32), nullable=True)
    service_latitude = Column(Float, nullable=True)
    service_longitude = Column(Float, nullable=True)
    total_earnings = Column(Numeric(12, 2), nullable=False, default=0)
    total_lessons_taught = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    user = relationship("User", back_populates="instructor_profile")
    availability = relationship(
        "InstructorAvailability",
        back_populates="instructor",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def has_service_area(self) -> bool:
        return self.service_latitude is not None and self.service_longitude is not None


class InstructorAvailability(Base):
    """One bookable (weekday, time slot) pair for an instructor."""

    __tablename__ = "instructor_availability"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    instructor_id = Column(
        String(26),
        ForeignKey("instructor_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    day_of_week = Column(String(10), nullable=False)
    time_slot = Column(String(11), nullable=False)

    instructor = relationship("InstructorProfile", back_populates="availability")

    __table_args__ = (
        UniqueConstraint(
            "instructor_id",
            "day_of_week",
            "time_slot",
            name="uq_instructor_availability_day_slot",
        ),
    )
