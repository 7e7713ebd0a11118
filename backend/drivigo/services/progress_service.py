# backend/drivigo/services/progress_service.py
"""
Progress Service for the Drivigo platform.

Instructors record one progress entry per completed lesson. Learners and
instructors read history, per-skill analysis and a report with study
recommendations derived from hours, ratings and essential-skill coverage.
"""

import asyncio
from collections import Counter, defaultdict
from datetime import date, datetime, timezone
from decimal import Decimal
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import (
    CHANNEL_PUSH,
    ESSENTIAL_SKILL_MIN_PRACTICE,
    ESSENTIAL_SKILLS,
    RECENT_LESSONS_IN_REPORT,
    TEMPLATE_LESSON_COMPLETION,
)
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..models.booking import BookingStatus
from ..models.progress import StudentProgress
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

RECOMMENDATION_MESSAGES = {
    "practice": (
        "Focus on building basic vehicle control and confidence. Practice in quiet areas first."
    ),
    "skill": "Start practicing in moderate traffic conditions and work on specific maneuvers.",
    "advanced": "Practice highway driving and complex traffic situations to prepare for test.",
    "improvement": "Focus on fundamentals. Consider scheduling more frequent shorter sessions.",
    "confidence": "Great progress! You're ready for more challenging driving scenarios.",
}


def build_recommendations(
    total_hours: float, average_rating: float, skill_counts: Dict[str, int]
) -> List[Dict[str, str]]:
    """
    Study recommendations for a learner.

    One hours-based entry always; a rating-based entry below 3 or from 4 up;
    a ``skills`` entry naming essential skills practiced fewer than 3 times.
    """
    recommendations: List[Dict[str, str]] = []

    if total_hours < 10:
        hours_type = "practice"
    elif total_hours < 20:
        hours_type = "skill"
    else:
        hours_type = "advanced"
    recommendations.append({"type": hours_type, "message": RECOMMENDATION_MESSAGES[hours_type]})

    if average_rating < 3:
        recommendations.append(
            {"type": "improvement", "message": RECOMMENDATION_MESSAGES["improvement"]}
        )
    elif average_rating >= 4:
        recommendations.append(
            {"type": "confidence", "message": RECOMMENDATION_MESSAGES["confidence"]}
        )

    under_practiced = [
        skill
        for skill in ESSENTIAL_SKILLS
        if skill_counts.get(skill, 0) < ESSENTIAL_SKILL_MIN_PRACTICE
    ]
    if under_practiced:
        recommendations.append(
            {
                "type": "skills",
                "message": f"Practice these essential skills more: {', '.join(under_practiced)}",
            }
        )
    return recommendations


def _skill_analysis(lessons: Iterable[StudentProgress]) -> Dict[str, List[Dict[str, Any]]]:
    practiced: Counter[str] = Counter()
    ratings: Dict[str, List[int]] = defaultdict(list)
    last_practiced: Dict[str, date] = {}
    mentioned: Counter[str] = Counter()
    last_mentioned: Dict[str, date] = {}

    for lesson in lessons:
        for skill in set(lesson.skills_practiced or []):
            practiced[skill] += 1
            if lesson.performance_rating is not None:
                ratings[skill].append(lesson.performance_rating)
            if skill not in last_practiced or lesson.lesson_date > last_practiced[skill]:
                last_practiced[skill] = lesson.lesson_date
        for area in set(lesson.areas_to_improve or []):
            mentioned[area] += 1
            if area not in last_mentioned or lesson.lesson_date > last_mentioned[area]:
                last_mentioned[area] = lesson.lesson_date

    skills = [
        {
            "skill": skill,
            "times_practiced": count,
            "average_performance": (
                round(sum(ratings[skill]) / len(ratings[skill]), 1) if ratings[skill] else 0.0
            ),
            "last_practiced": last_practiced[skill],
        }
        for skill, count in practiced.items()
    ]
    skills.sort(key=lambda row: (-row["times_practiced"], row["skill"]))

    areas = [
        {"area": area, "mentioned_times": count, "last_mentioned": last_mentioned[area]}
        for area, count in mentioned.items()
    ]
    areas.sort(key=lambda row: (-row["mentioned_times"], -row["last_mentioned"].toordinal()))

    return {"skillsPracticed": skills, "areasToImprove": areas}


class ProgressService(BaseService):
    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        super().__init__(db)
        self.progress_repository = RepositoryFactory.create_progress_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.notification_service = notification_service

    @BaseService.measure_operation("record_lesson_progress")
    def record_lesson_progress(
        self,
        instructor_user_id: str,
        *,
        learner_user_id: str,
        booking_id: str,
        driving_hours_logged: float,
        lesson_date: Optional[date] = None,
        lesson_type: Optional[str] = None,
        skills_practiced: Optional[List[str]] = None,
        performance_rating: Optional[int] = None,
        instructor_notes: Optional[str] = None,
        areas_to_improve: Optional[List[str]] = None,
        next_lesson_recommendations: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Upsert the progress entry for ``booking_id`` and complete the booking.

        ``total_driving_hours`` is the learner's completed hours on other
        bookings plus this lesson, so re-recording a lesson never double counts.
        """
        booking = self.booking_repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found.")
        if booking.instructor_user_id != instructor_user_id:
            raise ForbiddenException("You can only record progress for your own lessons")
        if booking.learner_user_id != learner_user_id:
            raise ValidationException("Learner does not match booking")

        hours = Decimal(str(driving_hours_logged))
        with self.transaction():
            prior_hours = self.progress_repository.sum_completed_hours(
                learner_user_id, exclude_booking_id=booking_id
            )
            total_hours = prior_hours + hours
            progress = self.progress_repository.upsert_for_booking(
                booking_id,
                learner_user_id=learner_user_id,
                instructor_user_id=instructor_user_id,
                lesson_date=lesson_date or booking.start_date,
                lesson_type=lesson_type,
                skills_practiced=list(skills_practiced or []),
                performance_rating=performance_rating,
                instructor_notes=instructor_notes,
                areas_to_improve=list(areas_to_improve or []),
                driving_hours_logged=hours,
                total_driving_hours=total_hours,
                next_lesson_recommendations=next_lesson_recommendations,
                lesson_completed=True,
            )
            if booking.status != BookingStatus.COMPLETED.value:
                self.booking_repository.mark_completed(booking_id)

        self.log_operation("progress_recorded", booking_id=booking_id)
        return {
            "success": True,
            "progressId": progress.id,
            "total_driving_hours": float(total_hours),
        }

    @BaseService.measure_operation("complete_lesson")
    async def complete_lesson(self, instructor_user_id: str, **fields: Any) -> Dict[str, Any]:
        """Record progress, then tell the learner; a failed notification is only logged."""
        result = await asyncio.to_thread(
            self.record_lesson_progress, instructor_user_id, **fields
        )
        if self.notification_service is not None:
            try:
                await self.notification_service.send_notification(
                    fields["learner_user_id"],
                    TEMPLATE_LESSON_COMPLETION,
                    {"student_name": "Student"},
                    [CHANNEL_PUSH],
                )
            except Exception as exc:
                self.logger.error(
                    "Lesson completion notification for booking %s failed: %s",
                    fields.get("booking_id"),
                    exc,
                )
        return result

    @BaseService.measure_operation("get_student_progress")
    def get_student_progress(self, learner_user_id: str) -> Dict[str, Any]:
        lessons = self.progress_repository.list_for_learner(learner_user_id)
        stats = self.progress_repository.learner_stats(learner_user_id)
        completed = self.progress_repository.completed_for_learner(learner_user_id)

        skills = sorted(
            {skill for lesson in completed for skill in (lesson.skills_practiced or [])}
        )
        stats["average_rating"] = round(stats["average_rating"], 1)
        stats["all_skills_practiced"] = skills
        return {"success": True, "lessons": lessons, "stats": stats}

    @BaseService.measure_operation("get_instructor_history")
    def get_instructor_history(self, instructor_user_id: str) -> Dict[str, Any]:
        lessons = self.progress_repository.list_for_instructor(instructor_user_id)
        stats = self.progress_repository.instructor_stats(instructor_user_id)
        stats["average_student_rating"] = round(stats["average_student_rating"], 1)
        return {"success": True, "lessons": lessons, "stats": stats}

    @BaseService.measure_operation("get_booking_progress")
    def get_booking_progress(self, booking_id: str) -> Dict[str, Any]:
        progress = self.progress_repository.get_by_booking(booking_id)
        return {
            "success": True,
            "progress": self.progress_repository.to_dict(progress) if progress else None,
        }

    @BaseService.measure_operation("get_skill_analysis")
    def get_skill_analysis(self, learner_user_id: str) -> Dict[str, Any]:
        analysis = _skill_analysis(self.progress_repository.completed_for_learner(learner_user_id))
        return {"success": True, **analysis}

    @BaseService.measure_operation("generate_progress_report")
    def generate_progress_report(self, learner_user_id: str) -> Dict[str, Any]:
        progress = self.get_student_progress(learner_user_id)
        skills = self.get_skill_analysis(learner_user_id)
        stats = progress["stats"]
        skill_counts = {
            row["skill"]: row["times_practiced"] for row in skills["skillsPracticed"]
        }
        return {
            "success": True,
            "report": {
                "studentId": learner_user_id,
                "generatedAt": datetime.now(timezone.utc),
                "summary": stats,
                "recentLessons": progress["lessons"][:RECENT_LESSONS_IN_REPORT],
                "skillsAnalysis": skills["skillsPracticed"],
                "areasToImprove": skills["areasToImprove"],
                "recommendations": build_recommendations(
                    stats["total_hours"], stats["average_rating"], skill_counts
                ),
            },
        }
