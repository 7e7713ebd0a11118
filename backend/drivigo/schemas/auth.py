"""Request/response schemas for registration and login."""

from typing import Optional

from pydantic import Field

from ._strict_base import StrictRequestModel
from .base import StandardizedModel


class RegisterRequest(StrictRequestModel):
    """Required fields are checked by the route so the client gets one message."""

    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=128)
    role: Optional[str] = None
    name: Optional[str] = Field(default=None, max_length=255)
    phone_number: Optional[str] = Field(default=None, max_length=32)


class LoginRequest(StrictRequestModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AuthUser(StandardizedModel):
    id: str
    email: str
    role: str


class RegisterResponse(StandardizedModel):
    message: str
    user: AuthUser


class LoginResponse(StandardizedModel):
    message: str
    token: str
    user: AuthUser
