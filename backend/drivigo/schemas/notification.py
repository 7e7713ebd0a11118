"""Schemas for the notification inbox, push subscriptions and manual sends."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ._strict_base import StrictRequestModel
from .base import StandardizedModel

Channel = Literal["push", "email", "sms"]


class NotificationResponse(StandardizedModel):
    id: str
    user_id: str
    type: str
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    is_read: bool
    push_sent_at: Optional[datetime] = None
    email_sent_at: Optional[datetime] = None
    sms_sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class NotificationListResponse(StandardizedModel):
    notifications: List[NotificationResponse]


class PushSubscribeRequest(StrictRequestModel):
    endpoint: str = Field(..., min_length=1)
    p256dh: str = Field(..., min_length=1)
    auth: str = Field(..., min_length=1)
    deviceType: Optional[str] = Field(default=None, max_length=20)


class PushUnsubscribeRequest(StrictRequestModel):
    endpoint: str = Field(..., min_length=1)


class SendNotificationRequest(StrictRequestModel):
    userId: str
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)
    channels: Optional[List[Channel]] = None


class VapidPublicKeyResponse(StandardizedModel):
    publicKey: str
