# backend/drivigo/routes/auth.py
"""
Authentication routes.

Endpoints:
    POST /register    → Create a learner or instructor account
    POST /login       → Exchange email and password for a JWT
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..api.dependencies.services import get_auth_service
from ..core.exceptions import DomainException, handle_domain_exception
from ..schemas.auth import AuthUser, LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from ..services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> RegisterResponse:
    """
    Register a new user.

    Raises:
        HTTPException: 400 when a required field is missing or the email is taken
    """
    if not (payload.email and payload.password and payload.role):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email, password, and role are required.",
        )
    try:
        user = await asyncio.to_thread(
            auth_service.register_user,
            email=payload.email,
            password=payload.password,
            role=payload.role,
            name=payload.name,
            phone_number=payload.phone_number,
        )
    except DomainException as exc:
        handle_domain_exception(exc)

    return RegisterResponse(
        message="User created successfully!",
        user=AuthUser(id=user.id, email=user.email, role=user.role),
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    if not (payload.email and payload.password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required.",
        )
    try:
        user = await asyncio.to_thread(
            auth_service.authenticate_user, payload.email.strip().lower(), payload.password
        )
    except DomainException as exc:
        handle_domain_exception(exc)

    return LoginResponse(
        message="Logged in successfully!",
        token=auth_service.issue_token(user),
        user=AuthUser(id=user.id, email=user.email, role=user.role),
    )
