"""
Notification models for Drivigo.

Includes message templates, the in-app inbox, web push subscriptions and
registered client devices.
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
import ulid

from ..database import Base


class NotificationTemplate(Base):
    """Editable message text; ``{{field}}`` placeholders are filled at send time."""

    __tablename__ = "notification_templates"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    template_name = Column(String(100), nullable=False, unique=True)
    subject = Column(String(255), nullable=True)
    content = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Notification(Base):
    """In-app notification inbox entries."""

    __tablename__ = "notifications"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(100), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    push_sent_at = Column(DateTime(timezone=True), nullable=True)
    email_sent_at = Column(DateTime(timezone=True), nullable=True)
    sms_sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user = relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        Index("ix_notifications_user_created_at", "user_id", created_at.desc()),
        Index("ix_notifications_user_is_read", "user_id", "is_read"),
    )


class PushSubscription(Base):
    """Web push subscription details for a user."""

    __tablename__ = "notification_subscriptions"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    endpoint = Column(Text, nullable=False)
    p256dh_key = Column(String(255), nullable=False)
    auth_key = Column(String(255), nullable=False)
    device_type = Column(String(20), nullable=False, default="web")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "endpoint", name="uq_notification_subscriptions_user_endpoint"),
    )


class UserDevice(Base):
    """A client install that reports heartbeats; keyed by its own device id."""

    __tablename__ = "user_devices"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    device_id = Column(String(255), nullable=False, unique=True)
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    device_type = Column(String(50), nullable=True)
    platform = Column(String(50), nullable=True)
    app_version = Column(String(50), nullable=True)
    push_token = Column(Text, nullable=True)
    last_active = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
