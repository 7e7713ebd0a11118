# backend/drivigo/routes/progress.py
"""
Lesson progress routes.

Endpoints:
    POST /progress/record                  → Instructor records a completed lesson
    GET /progress/student[/{student_id}]   → Learner lessons and stats
    GET /progress/instructor               → Instructor teaching history
    GET /progress/booking/{booking_id}     → Progress entry for one booking
    GET /progress/skills[/{student_id}]    → Skill frequency and weak areas
    GET /progress/report[/{student_id}]    → Full report with recommendations

Learners default to themselves when no student id is given.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ..api.dependencies.auth import ensure_instructor, get_current_user
from ..api.dependencies.services import get_progress_service
from ..core.exceptions import DomainException, handle_domain_exception
from ..models.user import User
from ..schemas.progress import RecordProgressRequest, RecordProgressResponse
from ..services.progress_service import ProgressService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/progress", tags=["progress"])


def _resolve_student_id(current_user: User, student_id: Optional[str]) -> str:
    if student_id:
        return student_id
    if current_user.is_learner:
        return current_user.id
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Student ID required")


@router.post("/record", response_model=RecordProgressResponse)
async def record_progress(
    payload: RecordProgressRequest,
    current_user: User = Depends(get_current_user),
    progress_service: ProgressService = Depends(get_progress_service),
) -> RecordProgressResponse:
    ensure_instructor(current_user, "Only instructors can record progress")
    try:
        result = await progress_service.complete_lesson(current_user.id, **payload.model_dump())
    except DomainException as exc:
        handle_domain_exception(exc)
    return RecordProgressResponse(**result)


@router.get("/student")
@router.get("/student/{student_id}")
async def get_student_progress(
    student_id: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    progress_service: ProgressService = Depends(get_progress_service),
) -> Dict[str, Any]:
    learner_id = _resolve_student_id(current_user, student_id)
    return await asyncio.to_thread(progress_service.get_student_progress, learner_id)


@router.get("/instructor")
async def get_instructor_history(
    current_user: User = Depends(get_current_user),
    progress_service: ProgressService = Depends(get_progress_service),
) -> Dict[str, Any]:
    ensure_instructor(current_user, "Only instructors can view teaching history")
    return await asyncio.to_thread(progress_service.get_instructor_history, current_user.id)


@router.get("/booking/{booking_id}")
async def get_booking_progress(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    progress_service: ProgressService = Depends(get_progress_service),
) -> Dict[str, Any]:
    return await asyncio.to_thread(progress_service.get_booking_progress, booking_id)


@router.get("/skills")
@router.get("/skills/{student_id}")
async def get_skill_analysis(
    student_id: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    progress_service: ProgressService = Depends(get_progress_service),
) -> Dict[str, Any]:
    learner_id = _resolve_student_id(current_user, student_id)
    return await asyncio.to_thread(progress_service.get_skill_analysis, learner_id)


@router.get("/report")
@router.get("/report/{student_id}")
async def get_progress_report(
    student_id: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    progress_service: ProgressService = Depends(get_progress_service),
) -> Dict[str, Any]:
    learner_id = _resolve_student_id(current_user, student_id)
    return await asyncio.to_thread(progress_service.generate_progress_report, learner_id)
