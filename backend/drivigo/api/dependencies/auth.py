# backend/drivigo/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

Tokens arrive as ``Authorization: Bearer <JWT>``. The user row is loaded on
every request so deleted accounts lose access immediately.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from sqlalchemy.orm import Session

from ...auth import decode_access_token
from ...models.user import User
from ...repositories.factory import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)

NO_TOKEN_MESSAGE = "No token, authorization denied"
INVALID_TOKEN_MESSAGE = "Token is not valid"

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_token_user(db: Session, token: str) -> Optional[User]:
    """Return the user a token belongs to, or None if the token or user is invalid."""
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError as exc:
        logger.debug("Rejected token: %s", exc)
        return None
    user_id = payload.get("sub")
    if not isinstance(user_id, str):
        return None
    return RepositoryFactory.create_user_repository(db).get_by_id(user_id)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the authenticated user.

    Raises:
        HTTPException: 401 when the token is missing, invalid, expired or
            points at a user that no longer exists
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized(NO_TOKEN_MESSAGE)
    user = resolve_token_user(db, credentials.credentials)
    if user is None:
        raise _unauthorized(INVALID_TOKEN_MESSAGE)
    return user


def ensure_instructor(user: User, message: str) -> None:
    """Raise 403 with ``message`` unless ``user`` is an instructor."""
    if not user.is_instructor:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=message)
