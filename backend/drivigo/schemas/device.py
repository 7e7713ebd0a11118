from typing import Optional

from pydantic import Field

from ._strict_base import StrictRequestModel


class DeviceRegisterRequest(StrictRequestModel):
    device_id: str = Field(..., min_length=1, max_length=255)
    device_type: Optional[str] = Field(default=None, max_length=50)
    platform: Optional[str] = Field(default=None, max_length=50)
    app_version: Optional[str] = Field(default=None, max_length=50)
    push_token: Optional[str] = None


class DeviceHeartbeatRequest(StrictRequestModel):
    device_id: str = Field(..., min_length=1, max_length=255)
