"""
Bearer Token Authentication

FastAPI dependencies that verify JWT access tokens, re-check the account
against the database and gate role-restricted endpoints.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from folio.shared.database import get_db
from folio.shared.schemas import MAX_DB_ID
from folio.shared.security import decode_access_token
from folio.users.models import Role, User

# Setup logging
logger = logging.getLogger(__name__)

# FastAPI dependency for the Authorization header
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated identity attached to a request."""
    user_id: int
    username: str
    role: Role


class InvalidTokenPayload(Exception):
    pass


def _identity_from_token(token: str, db: Session) -> Optional[CurrentUser]:
    """
    Decode a token and load its user.

    Returns None when the user no longer exists or has been deactivated.

    Raises:
        jwt.InvalidTokenError: If signature, expiry or format is invalid
        InvalidTokenPayload: If the claims are missing or malformed
    """
    payload = decode_access_token(token)
    try:
        user_id = int(payload["userId"])
    except (KeyError, TypeError, ValueError):
        raise InvalidTokenPayload("Token has no usable userId claim")
    if not 1 <= user_id <= MAX_DB_ID:
        raise InvalidTokenPayload("Token userId is out of range")

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        return None

    # Role comes from the database so demotions apply immediately
    return CurrentUser(user_id=user.id, username=user.username, role=user.role)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """
    Dependency that requires a valid bearer token

    Usage in endpoints:
    @router.post("/protected")
    def protected_endpoint(user: CurrentUser = Depends(get_current_user)):
        pass
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
        )

    try:
        identity = _identity_from_token(credentials.credentials, db)
    except (jwt.InvalidTokenError, InvalidTokenPayload) as e:
        logger.debug(f"Token rejected: {type(e).__name__}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token",
        )

    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or inactive user",
        )

    logger.debug(f"User authenticated: {identity.username} ({identity.role.value})")
    return identity


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[CurrentUser]:
    """Like get_current_user, but yields None instead of rejecting."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return _identity_from_token(credentials.credentials, db)
    except (jwt.InvalidTokenError, InvalidTokenPayload):
        return None


def require_roles(*roles: Role):
    """
    Build a dependency that only admits the given roles

    Usage:
    @router.post("", dependencies=[Depends(require_roles(Role.ADMIN))])
    """
    allowed = frozenset(roles)

    def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return dependency
