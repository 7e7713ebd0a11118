from .connection_manager import (
    EVENT_AUTHENTICATE,
    EVENT_AUTHENTICATED,
    EVENT_ERROR,
    EVENT_NEW_NOTIFICATION,
    ConnectionManager,
    build_event,
    build_notification_event,
    connection_manager,
)

__all__ = [
    "ConnectionManager",
    "connection_manager",
    "build_event",
    "build_notification_event",
    "EVENT_AUTHENTICATE",
    "EVENT_AUTHENTICATED",
    "EVENT_ERROR",
    "EVENT_NEW_NOTIFICATION",
]
