# backend/drivigo/services/realtime/connection_manager.py
"""
In-process registry of live WebSocket connections, keyed by user id.

Connections are not persisted; a restart drops them and clients reconnect.
"""

import asyncio
from datetime import datetime
import logging
from typing import Any, Dict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)

EVENT_AUTHENTICATE = "authenticate"
EVENT_AUTHENTICATED = "authenticated"
EVENT_ERROR = "error"
EVENT_NEW_NOTIFICATION = "newNotification"


def build_event(event: str, data: Any) -> Dict[str, Any]:
    return {"event": event, "data": data}


def build_notification_event(notification: Any) -> Dict[str, Any]:
    created_at = getattr(notification, "created_at", None)
    return build_event(
        EVENT_NEW_NOTIFICATION,
        {
            "id": notification.id,
            "type": notification.type,
            "title": notification.title,
            "message": notification.message,
            "data": notification.data or {},
            "created_at": created_at.isoformat() if isinstance(created_at, datetime) else None,
        },
    )


class ConnectionManager:
    def __init__(self) -> None:
        self._connections: Dict[str, Set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def register(self, user_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            self._connections.setdefault(user_id, set()).add(websocket)
        logger.debug("WebSocket registered for user %s", user_id)

    async def unregister(self, user_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            sockets = self._connections.get(user_id)
            if not sockets:
                return
            sockets.discard(websocket)
            if not sockets:
                del self._connections[user_id]
        logger.debug("WebSocket removed for user %s", user_id)

    async def publish_to_user(self, user_id: str, event: Dict[str, Any]) -> int:
        """
        Send ``event`` to every socket of ``user_id``.

        Returns the number of sockets reached. Sockets that fail to send are
        dropped from the registry.
        """
        async with self._lock:
            sockets = list(self._connections.get(user_id, ()))

        delivered = 0
        for websocket in sockets:
            try:
                await websocket.send_json(event)
                delivered += 1
            except Exception as exc:
                logger.warning("Dropping dead WebSocket for user %s: %s", user_id, exc)
                await self.unregister(user_id, websocket)
        return delivered


connection_manager = ConnectionManager()
