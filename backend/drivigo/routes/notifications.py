# backend/drivigo/routes/notifications.py
"""
Notification routes.

Endpoints:
    GET /notifications                       → Caller's inbox, newest first
    PUT /notifications/{id}/read             → Mark one notification read
    POST /notifications/subscribe            → Register a web push subscription
    DELETE /notifications/unsubscribe        → Deactivate a web push subscription
    POST /notifications/send                 → Send a templated notification
    POST /notifications/schedule-reminders   → Internal job: tomorrow's lesson reminders
    GET /vapid-public-key                    → Public VAPID key for the browser
"""

import asyncio
import hmac
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status

from ..api.dependencies.auth import get_current_user
from ..api.dependencies.services import get_notification_service, get_push_notification_service
from ..core.config import settings
from ..core.constants import DEFAULT_NOTIFICATION_LIMIT, MAX_NOTIFICATION_LIMIT
from ..core.exceptions import DomainException, handle_domain_exception
from ..models.user import User
from ..schemas.base import SuccessResponse
from ..schemas.notification import (
    NotificationListResponse,
    NotificationResponse,
    PushSubscribeRequest,
    PushUnsubscribeRequest,
    SendNotificationRequest,
    VapidPublicKeyResponse,
)
from ..services.notification_service import NotificationService
from ..services.push_notification_service import PushNotificationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])


def _internal_key_matches(api_key: Optional[str]) -> bool:
    expected = settings.internal_api_key.get_secret_value()
    if not expected or not api_key:
        return False
    return hmac.compare_digest(api_key, expected)


@router.get("/notifications", response_model=NotificationListResponse)
async def list_notifications(
    limit: int = Query(DEFAULT_NOTIFICATION_LIMIT, ge=1),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> NotificationListResponse:
    rows = await asyncio.to_thread(
        notification_service.list_notifications,
        current_user.id,
        min(limit, MAX_NOTIFICATION_LIMIT),
        offset,
    )
    return NotificationListResponse(
        notifications=[NotificationResponse(**row) for row in rows]
    )


@router.put("/notifications/{notification_id}/read", response_model=SuccessResponse)
async def mark_notification_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> SuccessResponse:
    """Idempotent; unknown or foreign ids still report success."""
    await asyncio.to_thread(notification_service.mark_as_read, notification_id, current_user.id)
    return SuccessResponse(success=True, message="Notification marked as read")


@router.post("/notifications/subscribe", response_model=SuccessResponse)
async def subscribe(
    payload: PushSubscribeRequest,
    current_user: User = Depends(get_current_user),
    push_service: PushNotificationService = Depends(get_push_notification_service),
) -> SuccessResponse:
    try:
        await asyncio.to_thread(
            push_service.subscribe,
            current_user.id,
            payload.endpoint,
            payload.p256dh,
            payload.auth,
            payload.deviceType,
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    return SuccessResponse(success=True, message="Push notification subscription saved")


@router.delete("/notifications/unsubscribe", response_model=SuccessResponse)
async def unsubscribe(
    payload: PushUnsubscribeRequest,
    current_user: User = Depends(get_current_user),
    push_service: PushNotificationService = Depends(get_push_notification_service),
) -> SuccessResponse:
    try:
        await asyncio.to_thread(push_service.unsubscribe, current_user.id, payload.endpoint)
    except DomainException as exc:
        handle_domain_exception(exc)
    return SuccessResponse(success=True, message="Unsubscribed from push notifications")


@router.post("/notifications/send")
async def send_notification(
    payload: SendNotificationRequest,
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> Dict[str, Any]:
    """
    Send a templated notification.

    Users may notify themselves; instructors may notify anyone.
    """
    if payload.userId != current_user.id and not current_user.is_instructor:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
    try:
        return await notification_service.send_notification(
            payload.userId, payload.type, payload.data, payload.channels
        )
    except DomainException as exc:
        handle_domain_exception(exc)


@router.post("/notifications/schedule-reminders", response_model=SuccessResponse)
async def schedule_reminders(
    x_api_key: Optional[str] = Header(default=None, alias="x-api-key"),
    notification_service: NotificationService = Depends(get_notification_service),
) -> SuccessResponse:
    if not _internal_key_matches(x_api_key):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    sent = await notification_service.schedule_reminders()
    logger.info("Reminder job finished, %s sent", sent)
    return SuccessResponse(success=True, message="Reminders scheduled successfully")


@router.get("/vapid-public-key", response_model=VapidPublicKeyResponse)
async def get_vapid_public_key() -> VapidPublicKeyResponse:
    return VapidPublicKeyResponse(publicKey=PushNotificationService.get_vapid_public_key())
