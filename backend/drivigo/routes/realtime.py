# backend/drivigo/routes/realtime.py
"""
WebSocket endpoint for live notifications.

Protocol:
    client → {"event": "authenticate", "data": "<JWT>"}
    server → {"event": "authenticated", "data": {"userId": ...}}
    server → {"event": "newNotification", "data": {...}}

A bad token gets an ``error`` event and the socket is closed with 4401.
"""

import asyncio
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import sessionmaker

from ..api.dependencies.auth import INVALID_TOKEN_MESSAGE, resolve_token_user
from ..api.dependencies.database import get_session_factory
from ..core.constants import WEBSOCKET_PATH, WS_CLOSE_UNAUTHORIZED
from ..services.realtime import (
    EVENT_AUTHENTICATE,
    EVENT_AUTHENTICATED,
    EVENT_ERROR,
    build_event,
    connection_manager,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


def _authenticate(session_factory: sessionmaker, token: Any) -> Optional[str]:
    if not isinstance(token, str) or not token:
        return None
    db = session_factory()
    try:
        user = resolve_token_user(db, token)
        return user.id if user is not None else None
    finally:
        db.close()


@router.websocket(WEBSOCKET_PATH)
async def notifications_socket(
    websocket: WebSocket,
    session_factory: sessionmaker = Depends(get_session_factory),
) -> None:
    await websocket.accept()

    try:
        message = await websocket.receive_json()
    except WebSocketDisconnect:
        return
    except (KeyError, ValueError):
        # binary or non-JSON frame
        message = None

    user_id = None
    if isinstance(message, dict) and message.get("event") == EVENT_AUTHENTICATE:
        user_id = await asyncio.to_thread(_authenticate, session_factory, message.get("data"))

    if user_id is None:
        await websocket.send_json(build_event(EVENT_ERROR, {"message": INVALID_TOKEN_MESSAGE}))
        await websocket.close(code=WS_CLOSE_UNAUTHORIZED)
        return

    await connection_manager.register(user_id, websocket)
    await websocket.send_json(build_event(EVENT_AUTHENTICATED, {"userId": user_id}))
    try:
        while True:
            # Clients only listen; inbound frames of either kind are drained
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                logger.debug("WebSocket for user %s disconnected", user_id)
                break
    finally:
        await connection_manager.unregister(user_id, websocket)
