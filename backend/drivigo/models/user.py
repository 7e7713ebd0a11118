# backend/drivigo/models/user.py
"""
User model for the Drivigo platform.

A single table holds both learners and instructors; the role decides which
side of a booking the account is on.
"""

from enum import Enum

from sqlalchemy import CheckConstraint, Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class UserRole(str, Enum):
    LEARNER = "learner"
    INSTRUCTOR = "instructor"


class User(Base):
    __tablename__ = "users"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)
    name = Column(String(255), nullable=True)
    phone_number = Column(String(32), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    instructor_profile = relationship(
        "InstructorProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("role IN ('learner', 'instructor')", name="ck_users_role"),
    )

    @property
    def is_instructor(self) -> bool:
        return self.role == UserRole.INSTRUCTOR.value

    @property
    def is_learner(self) -> bool:
        return self.role == UserRole.LEARNER.value

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
