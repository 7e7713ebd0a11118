# backend/drivigo/services/notification_service.py
"""
Notification Service for the Drivigo platform.

Renders a stored template, records the inbox entry, pushes it to live
WebSocket connections and fans it out to push, email and SMS. Every channel
is attempted independently; one failing never blocks the others.
"""

import asyncio
from datetime import date, datetime, timedelta, timezone
import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy.orm import Session

from ..core.constants import (
    CHANNEL_EMAIL,
    CHANNEL_PUSH,
    CHANNEL_SMS,
    DEFAULT_NOTIFICATION_CHANNELS,
    NOTIFICATION_CHANNELS,
    TEMPLATE_LESSON_REMINDER,
)
from ..core.exceptions import NotificationDeliveryException, TemplateNotFoundException
from ..models.notification import Notification, NotificationTemplate
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .email import EmailService
from .push_notification_service import PushNotificationService
from .realtime import ConnectionManager, build_notification_event, connection_manager
from .sms_service import SMSService, SMSStatus

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def render_template(template: str, data: Mapping[str, Any]) -> str:
    """
    Replace ``{{key}}`` placeholders with ``str(data[key])``.

    Unknown placeholders are left untouched; ``None`` renders as an empty string.
    """

    def _substitute(match: "re.Match[str]") -> str:
        key = match.group(1)
        if key not in data:
            return match.group(0)
        value = data[key]
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(_substitute, template)


def template_title(template: NotificationTemplate) -> str:
    """Subject, or the first sentence of the content when there is none."""
    if template.subject:
        return template.subject
    return (template.content or "").split(".")[0].strip()


def notification_to_dict(notification: Notification) -> Dict[str, Any]:
    return {
        "id": notification.id,
        "user_id": notification.user_id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "data": notification.data or {},
        "is_read": notification.is_read,
        "push_sent_at": notification.push_sent_at,
        "email_sent_at": notification.email_sent_at,
        "sms_sent_at": notification.sms_sent_at,
        "created_at": notification.created_at,
    }


class NotificationService(BaseService):
    """
    Central dispatcher for user notifications.

    Gateways are injected so tests and jobs can swap them; by default each
    one reads its credentials from settings and disables itself when absent.
    """

    def __init__(
        self,
        db: Session,
        push_service: Optional[PushNotificationService] = None,
        email_service: Optional[EmailService] = None,
        sms_service: Optional[SMSService] = None,
        realtime: Optional[ConnectionManager] = None,
    ):
        super().__init__(db)
        self.notification_repository = RepositoryFactory.create_notification_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.push_service = push_service or PushNotificationService(
            db, self.notification_repository
        )
        self.email_service = email_service or EmailService(db)
        self.sms_service = sms_service or SMSService()
        self.realtime = realtime or connection_manager

    @BaseService.measure_operation("create_notification")
    def create_notification(
        self, user_id: str, template_name: str, data: Mapping[str, Any]
    ) -> Notification:
        """Render ``template_name`` with ``data`` and store the inbox row."""
        template = self.notification_repository.get_active_template(template_name)
        if template is None:
            raise TemplateNotFoundException(template_name)

        with self.transaction():
            notification = self.notification_repository.create(
                user_id=user_id,
                type=template_name,
                title=render_template(template_title(template), data),
                message=render_template(template.content, data),
                data=dict(data),
            )
        self.db.refresh(notification)
        return notification

    @BaseService.measure_operation("send_notification")
    async def send_notification(
        self,
        user_id: str,
        template_name: str,
        data: Optional[Mapping[str, Any]] = None,
        channels: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """
        Create a notification and deliver it on ``channels``.

        Returns ``{success, notificationId, results}`` where ``results`` maps each
        requested channel to ``{success, ...}`` or ``{success: False, error}``.

        Raises:
            TemplateNotFoundException: no active template with that name
        """
        payload = {key: _jsonable(value) for key, value in (data or {}).items()}
        requested = list(channels) if channels else list(DEFAULT_NOTIFICATION_CHANNELS)

        notification = await asyncio.to_thread(
            self.create_notification, user_id, template_name, payload
        )
        await self._publish_realtime(notification)

        user = await asyncio.to_thread(self.user_repository.get_by_id, user_id)

        results: Dict[str, Dict[str, Any]] = {}
        for channel in requested:
            try:
                outcome = await self._deliver(channel, user, notification)
                results[channel] = {"success": True, **outcome}
            except Exception as exc:
                self.logger.warning(
                    "Notification %s: %s delivery to user %s failed: %s",
                    notification.id,
                    channel,
                    user_id,
                    exc,
                )
                results[channel] = {"success": False, "error": str(exc)}
            if channel in NOTIFICATION_CHANNELS:
                prometheus_metrics.record_notification_delivery(
                    channel, results[channel]["success"]
                )

        delivered = [channel for channel, result in results.items() if result["success"]]
        if delivered:
            await asyncio.to_thread(self._stamp_sent, notification.id, delivered)

        return {"success": True, "notificationId": notification.id, "results": results}

    async def _publish_realtime(self, notification: Notification) -> None:
        try:
            await self.realtime.publish_to_user(
                notification.user_id, build_notification_event(notification)
            )
        except Exception as exc:
            self.logger.warning("Realtime publish failed for %s: %s", notification.id, exc)

    async def _deliver(
        self, channel: str, user: Optional[User], notification: Notification
    ) -> Dict[str, Any]:
        if channel == CHANNEL_PUSH:
            return await asyncio.to_thread(
                self.push_service.send_push_notification,
                notification.user_id,
                notification.title,
                notification.message,
                notification.type,
            )

        if user is None:
            raise NotificationDeliveryException("User not found")

        if channel == CHANNEL_EMAIL:
            if not user.email:
                raise NotificationDeliveryException("User email not found")
            await asyncio.to_thread(
                self.email_service.send_notification_email,
                user.email,
                notification.title,
                notification.message,
                user.name,
            )
            return {"recipient": user.email}

        if channel == CHANNEL_SMS:
            if not user.phone_number:
                raise NotificationDeliveryException("User phone number not found")
            result, status = await self.sms_service.send_sms_with_status(
                user.phone_number, notification.message
            )
            if status is not SMSStatus.SUCCESS:
                raise NotificationDeliveryException(f"SMS not sent ({status})")
            return {"recipient": user.phone_number, "sid": (result or {}).get("sid")}

        raise NotificationDeliveryException(f"Unsupported channel: {channel}")

    def _stamp_sent(self, notification_id: str, channels: List[str]) -> None:
        with self.transaction():
            self.notification_repository.stamp_sent(
                notification_id, channels, datetime.now(timezone.utc)
            )

    # Inbox

    @BaseService.measure_operation("list_notifications")
    def list_notifications(self, user_id: str, limit: int, offset: int) -> List[Dict[str, Any]]:
        rows = self.notification_repository.list_for_user(user_id, limit=limit, offset=offset)
        return [notification_to_dict(row) for row in rows]

    @BaseService.measure_operation("mark_as_read")
    def mark_as_read(self, notification_id: str, user_id: str) -> bool:
        """Idempotent; rows owned by other users are never touched."""
        with self.transaction():
            return self.notification_repository.mark_read(notification_id, user_id) > 0

    # Jobs

    @BaseService.measure_operation("schedule_reminders")
    async def schedule_reminders(self, on_date: Optional[date] = None) -> int:
        """
        Send the lesson reminder to the learner of every confirmed booking
        starting tomorrow (or ``on_date``). Returns the number of reminders sent.
        """
        target = on_date or date.today() + timedelta(days=1)
        reminders = await asyncio.to_thread(self._reminder_targets, target)

        sent = 0
        for booking_id, learner_user_id, data in reminders:
            try:
                await self.send_notification(
                    learner_user_id, TEMPLATE_LESSON_REMINDER, data, [CHANNEL_PUSH, CHANNEL_SMS]
                )
                sent += 1
            except Exception as exc:
                self.logger.error("Reminder for booking %s failed: %s", booking_id, exc)

        self.logger.info("Sent %s reminder notifications for %s", sent, target)
        return sent

    def _reminder_targets(self, on_date: date) -> List[tuple[str, str, Dict[str, Any]]]:
        targets = []
        for booking in self.booking_repository.list_confirmed_on(on_date):
            instructor = booking.instructor
            profile = instructor.instructor_profile if instructor else None
            targets.append(
                (
                    booking.id,
                    booking.learner_user_id,
                    {
                        "lesson_time": booking.time_slot,
                        "instructor_name": instructor.name if instructor else None,
                        "car_model": profile.car_model if profile else None,
                    },
                )
            )
        return targets


def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value
