# backend/drivigo/routes/devices.py
"""
Device registry routes for app installs.

Endpoints:
    POST /device/register     → Upsert a device for the caller
    PUT /device/heartbeat     → Refresh the device's last_active
"""

import asyncio
import logging

from fastapi import APIRouter, Depends

from ..api.dependencies.auth import get_current_user
from ..api.dependencies.services import get_device_service
from ..core.exceptions import DomainException, handle_domain_exception
from ..models.user import User
from ..schemas.base import SuccessResponse
from ..schemas.device import DeviceHeartbeatRequest, DeviceRegisterRequest
from ..services.device_service import DeviceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/device", tags=["devices"])


@router.post("/register", response_model=SuccessResponse)
async def register_device(
    payload: DeviceRegisterRequest,
    current_user: User = Depends(get_current_user),
    device_service: DeviceService = Depends(get_device_service),
) -> SuccessResponse:
    try:
        await asyncio.to_thread(
            device_service.register_device, current_user.id, **payload.model_dump()
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    return SuccessResponse(success=True, message="Device registered successfully")


@router.put("/heartbeat", response_model=SuccessResponse)
async def heartbeat(
    payload: DeviceHeartbeatRequest,
    current_user: User = Depends(get_current_user),
    device_service: DeviceService = Depends(get_device_service),
) -> SuccessResponse:
    await asyncio.to_thread(device_service.heartbeat, current_user.id, payload.device_id)
    return SuccessResponse(success=True)
