# backend/drivigo/services/auth_service.py
"""
Authentication Service for the Drivigo platform

Handles user registration and credential checks. Token signing lives in
``drivigo.auth``.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..auth import (
    DUMMY_HASH_FOR_TIMING_ATTACK,
    create_access_token,
    get_password_hash,
    verify_password,
)
from ..core.exceptions import (
    RepositoryException,
    UnauthorizedException,
    ValidationException,
)
from ..models.user import User, UserRole
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "User with this email already exists."
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials."


class AuthService(BaseService):
    """Service for handling authentication operations."""

    def __init__(self, db: Session) -> None:
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    @BaseService.measure_operation("register_user")
    def register_user(
        self,
        email: str,
        password: str,
        role: str,
        name: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> User:
        """
        Register a new user.

        Raises:
            ValidationException: email already registered or unknown role
        """
        email = email.strip().lower()
        if role not in {r.value for r in UserRole}:
            raise ValidationException(f"Unknown role: {role}")
        if self.user_repository.get_by_email(email):
            raise ValidationException(DUPLICATE_EMAIL_MESSAGE)

        try:
            with self.transaction():
                user = self.user_repository.create(
                    email=email,
                    password_hash=get_password_hash(password),
                    role=role,
                    name=name,
                    phone_number=phone_number,
                )
        except RepositoryException as exc:
            # Lost a race with a concurrent registration for the same email
            self.logger.warning("Registration insert failed for %s: %s", email, exc)
            raise ValidationException(DUPLICATE_EMAIL_MESSAGE) from exc

        self.log_operation("user_registered", user_id=user.id, role=role)
        return user

    @BaseService.measure_operation("authenticate_user")
    def authenticate_user(self, email: str, password: str) -> User:
        """
        Check credentials.

        Unknown emails still pay for one bcrypt verify so both failure paths
        take the same time.

        Raises:
            UnauthorizedException: unknown email or wrong password
        """
        user = self.user_repository.get_by_email(email)
        if user is None:
            verify_password(password, DUMMY_HASH_FOR_TIMING_ATTACK)
            raise UnauthorizedException(INVALID_CREDENTIALS_MESSAGE)
        if not verify_password(password, user.password_hash):
            raise UnauthorizedException(INVALID_CREDENTIALS_MESSAGE)
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token({"sub": user.id, "role": user.role})
