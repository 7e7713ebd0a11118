# backend/drivigo/services/push_notification_service.py
"""
Push notification service for web push subscriptions and delivery.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from pywebpush import WebPushException, webpush
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import DEFAULT_NOTIFICATION_URL, NOTIFICATION_URLS
from ..models.notification import PushSubscription
from ..repositories.notification_repository import NotificationRepository
from .base import BaseService

logger = logging.getLogger(__name__)

DEFAULT_ICON = "/icon-192x192.png"
DEFAULT_BADGE = "/badge-72x72.png"


def notification_url(notification_type: Optional[str]) -> str:
    """
    Click-through path for a notification type.

    Template names carry a channel suffix (``booking_confirmation_email``), so the
    longest known prefix wins.
    """
    if not notification_type:
        return DEFAULT_NOTIFICATION_URL
    if notification_type in NOTIFICATION_URLS:
        return NOTIFICATION_URLS[notification_type]
    for prefix in sorted(NOTIFICATION_URLS, key=len, reverse=True):
        if notification_type.startswith(prefix):
            return NOTIFICATION_URLS[prefix]
    return DEFAULT_NOTIFICATION_URL


class PushNotificationService(BaseService):
    """Service for managing web push notifications."""

    def __init__(
        self,
        db: Session,
        notification_repository: Optional[NotificationRepository] = None,
    ) -> None:
        super().__init__(db)
        self.notification_repository = notification_repository or NotificationRepository(db)
        self._last_send_expired = False

    @BaseService.measure_operation("subscribe")
    def subscribe(
        self,
        user_id: str,
        endpoint: str,
        p256dh_key: str,
        auth_key: str,
        device_type: Optional[str] = None,
    ) -> PushSubscription:
        """
        Store a push subscription for a user.

        Re-subscribing the same endpoint refreshes its keys and reactivates it.
        """
        with self.transaction():
            return self.notification_repository.upsert_subscription(
                user_id=user_id,
                endpoint=endpoint,
                p256dh_key=p256dh_key,
                auth_key=auth_key,
                device_type=device_type or "web",
            )

    @BaseService.measure_operation("unsubscribe")
    def unsubscribe(self, user_id: str, endpoint: str) -> bool:
        """Mark a subscription inactive. Returns True if one was found."""
        with self.transaction():
            return self.notification_repository.deactivate_subscription(user_id, endpoint) > 0

    @BaseService.measure_operation("get_user_subscriptions")
    def get_user_subscriptions(self, user_id: str) -> List[PushSubscription]:
        return self.notification_repository.get_active_subscriptions(user_id)

    @BaseService.measure_operation("send_push_notification")
    def send_push_notification(
        self,
        user_id: str,
        title: str,
        body: str,
        notification_type: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Send push notification to all of a user's subscribed devices.

        Returns:
            dict with 'sent', 'failed', 'expired' counts and per-endpoint results
        """
        summary: Dict[str, Any] = {"sent": 0, "failed": 0, "expired": 0, "results": []}
        if not self.is_configured():
            self.logger.warning("Push notifications not configured; skipping send")
            return summary

        subscriptions = self.get_user_subscriptions(user_id)
        if not subscriptions:
            return summary

        payload = self._build_payload(
            title=title, body=body, url=notification_url(notification_type), data=data
        )

        for subscription in subscriptions:
            error = self._send_to_subscription(subscription, payload)
            if error is None:
                summary["sent"] += 1
                summary["results"].append({"success": True, "endpoint": subscription.endpoint})
                continue
            if self._last_send_expired:
                summary["expired"] += 1
            else:
                summary["failed"] += 1
            summary["results"].append(
                {"success": False, "endpoint": subscription.endpoint, "error": error}
            )

        return summary

    def _send_to_subscription(self, subscription: PushSubscription, payload: str) -> Optional[str]:
        """
        Send push to a single subscription.

        Returns None on success, otherwise the error text. Expired endpoints
        (404/410) are deactivated.
        """
        self._last_send_expired = False

        try:
            webpush(
                subscription_info={
                    "endpoint": subscription.endpoint,
                    "keys": {
                        "p256dh": subscription.p256dh_key,
                        "auth": subscription.auth_key,
                    },
                },
                data=payload,
                vapid_private_key=settings.vapid_private_key.get_secret_value().strip(),
                vapid_claims={"sub": settings.vapid_claims_email},
            )
            return None
        except WebPushException as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            if status_code in (404, 410):
                self._last_send_expired = True
                self.logger.info(
                    "Push subscription expired; deactivating endpoint=%s user_id=%s",
                    subscription.endpoint,
                    subscription.user_id,
                )
                with self.transaction():
                    self.notification_repository.deactivate_subscription(
                        subscription.user_id, subscription.endpoint
                    )
                return f"Subscription expired (HTTP {status_code})"

            self.logger.error("Push send failed: %s", exc)
            return str(exc)
        except Exception as exc:
            self.logger.error("Push send failed: %s", exc)
            return str(exc)

    def _build_payload(
        self,
        title: str,
        body: str,
        url: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Build JSON payload for push notification."""
        payload_data: Dict[str, Any] = {}
        if data:
            payload_data.update(data)
        payload_data["url"] = url or DEFAULT_NOTIFICATION_URL

        payload: Dict[str, Any] = {
            "title": title,
            "body": body,
            "icon": DEFAULT_ICON,
            "badge": DEFAULT_BADGE,
            "data": payload_data,
        }
        return json.dumps(payload, default=str)

    @staticmethod
    def get_vapid_public_key() -> str:
        """VAPID public key for client subscription; safe to expose."""
        return settings.vapid_public_key

    @staticmethod
    def is_configured() -> bool:
        return bool(
            settings.vapid_public_key and settings.vapid_private_key.get_secret_value().strip()
        )
