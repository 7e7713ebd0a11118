# backend/drivigo/routes/earnings.py
"""
Instructor earnings routes. Every endpoint is instructor only.

Endpoints:
    GET /earnings/dashboard    → Summary, daily, recent and monthly figures
    GET /earnings/report       → Transactions and totals for a date range
    GET /earnings/analytics    → Payment methods, peak slots, top students
    GET /earnings/pending      → Unpaid earnings
"""

import asyncio
from datetime import date
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from ..api.dependencies.auth import ensure_instructor, get_current_user
from ..api.dependencies.services import get_earnings_service
from ..core.exceptions import DomainException, handle_domain_exception
from ..models.user import User
from ..services.earnings_service import EarningsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/earnings", tags=["earnings"])


@router.get("/dashboard")
async def get_dashboard(
    period: str = Query("month", pattern="^(week|month|year|all)$"),
    current_user: User = Depends(get_current_user),
    earnings_service: EarningsService = Depends(get_earnings_service),
) -> Dict[str, Any]:
    ensure_instructor(current_user, "Only instructors can view earnings")
    return await asyncio.to_thread(earnings_service.get_dashboard, current_user.id, period)


@router.get("/report")
async def get_report(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    current_user: User = Depends(get_current_user),
    earnings_service: EarningsService = Depends(get_earnings_service),
) -> Dict[str, Any]:
    ensure_instructor(current_user, "Only instructors can view earnings")
    try:
        return await asyncio.to_thread(
            earnings_service.get_report, current_user.id, start_date, end_date
        )
    except DomainException as exc:
        handle_domain_exception(exc)


@router.get("/analytics")
async def get_analytics(
    current_user: User = Depends(get_current_user),
    earnings_service: EarningsService = Depends(get_earnings_service),
) -> Dict[str, Any]:
    ensure_instructor(current_user, "Only instructors can view analytics")
    return await asyncio.to_thread(earnings_service.get_analytics, current_user.id)


@router.get("/pending")
async def get_pending_payments(
    current_user: User = Depends(get_current_user),
    earnings_service: EarningsService = Depends(get_earnings_service),
) -> Dict[str, Any]:
    ensure_instructor(current_user, "Only instructors can view pending payments")
    return await asyncio.to_thread(earnings_service.get_pending_payments, current_user.id)
