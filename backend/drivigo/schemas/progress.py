"""Schemas for lesson progress recording."""

from datetime import date
from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictRequestModel
from .base import StandardizedModel


class RecordProgressRequest(StrictRequestModel):
    learner_user_id: str
    booking_id: str
    lesson_date: Optional[date] = None
    lesson_type: Optional[str] = Field(default=None, max_length=50)
    skills_practiced: List[str] = Field(default_factory=list)
    performance_rating: Optional[int] = Field(default=None, ge=1, le=5)
    instructor_notes: Optional[str] = None
    areas_to_improve: List[str] = Field(default_factory=list)
    driving_hours_logged: float = Field(..., ge=0, le=24)
    next_lesson_recommendations: Optional[str] = None


class RecordProgressResponse(StandardizedModel):
    success: bool
    progressId: str
    total_driving_hours: float
