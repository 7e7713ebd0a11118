# backend/drivigo/repositories/notification_repository.py
"""
Repository for notification inbox entries, templates and push subscriptions.
"""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.notification import Notification, NotificationTemplate, PushSubscription
from .base_repository import BaseRepository

_SENT_AT_COLUMNS = {
    "push": "push_sent_at",
    "email": "email_sent_at",
    "sms": "sms_sent_at",
}


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self, db: Session):
        super().__init__(db, Notification)

    # Templates

    def get_active_template(self, template_name: str) -> Optional[NotificationTemplate]:
        try:
            return (
                self.db.query(NotificationTemplate)
                .filter(
                    NotificationTemplate.template_name == template_name,
                    NotificationTemplate.is_active.is_(True),
                )
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error loading template %s: %s", template_name, e)
            raise RepositoryException(f"Failed to load template: {e}") from e

    # Inbox

    def list_for_user(self, user_id: str, *, limit: int, offset: int) -> List[Notification]:
        try:
            return (
                self.db.query(Notification)
                .filter(Notification.user_id == user_id)
                .order_by(Notification.created_at.desc(), Notification.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error listing notifications for %s: %s", user_id, e)
            raise RepositoryException(f"Failed to retrieve notifications: {e}") from e

    def mark_read(self, notification_id: str, user_id: str) -> int:
        """Set ``is_read``; scoped to the owner so other users' rows are untouched."""
        try:
            updated = (
                self.db.query(Notification)
                .filter(Notification.id == notification_id, Notification.user_id == user_id)
                .update({Notification.is_read: True})
            )
            self.db.flush()
            return updated
        except SQLAlchemyError as e:
            self.logger.error("Error marking notification %s read: %s", notification_id, e)
            raise RepositoryException(f"Failed to update notification: {e}") from e

    def stamp_sent(self, notification_id: str, channels: List[str], sent_at: datetime) -> None:
        values: Dict[str, datetime] = {
            _SENT_AT_COLUMNS[channel]: sent_at
            for channel in channels
            if channel in _SENT_AT_COLUMNS
        }
        if not values:
            return
        self.update(notification_id, **values)

    # Push subscriptions

    def upsert_subscription(
        self,
        user_id: str,
        endpoint: str,
        p256dh_key: str,
        auth_key: str,
        device_type: str = "web",
    ) -> PushSubscription:
        try:
            subscription = (
                self.db.query(PushSubscription)
                .filter(PushSubscription.user_id == user_id, PushSubscription.endpoint == endpoint)
                .first()
            )
            if subscription is None:
                subscription = PushSubscription(
                    user_id=user_id,
                    endpoint=endpoint,
                    p256dh_key=p256dh_key,
                    auth_key=auth_key,
                    device_type=device_type,
                    is_active=True,
                )
                self.db.add(subscription)
            else:
                subscription.p256dh_key = p256dh_key
                subscription.auth_key = auth_key
                subscription.is_active = True
            self.db.flush()
            return subscription
        except SQLAlchemyError as e:
            self.logger.error("Error saving push subscription: %s", e)
            raise RepositoryException(f"Failed to save subscription: {e}") from e

    def deactivate_subscription(self, user_id: str, endpoint: str) -> int:
        try:
            updated = (
                self.db.query(PushSubscription)
                .filter(PushSubscription.user_id == user_id, PushSubscription.endpoint == endpoint)
                .update({PushSubscription.is_active: False})
            )
            self.db.flush()
            return updated
        except SQLAlchemyError as e:
            self.logger.error("Error deactivating push subscription: %s", e)
            raise RepositoryException(f"Failed to update subscription: {e}") from e

    def get_active_subscriptions(self, user_id: str) -> List[PushSubscription]:
        try:
            return (
                self.db.query(PushSubscription)
                .filter(PushSubscription.user_id == user_id, PushSubscription.is_active.is_(True))
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error listing push subscriptions: %s", e)
            raise RepositoryException(f"Failed to retrieve subscriptions: {e}") from e
