"""
Password hashing and JWT helpers

Passwords are hashed with bcrypt (cost factor 12). Access tokens are
HS256-signed JWTs carrying the user id, username and role.
"""

import os
import re
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
import jwt

from folio.shared.errors import is_production

logger = logging.getLogger(__name__)

JWT_SECRET = os.getenv("JWT_SECRET")
JWT_EXPIRES_IN = os.getenv("JWT_EXPIRES_IN", "24h")
JWT_ALGORITHM = "HS256"

BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72

_DEV_SECRET = "folio-development-secret-change-me"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("Password cannot be empty")
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def parse_duration(value: str) -> timedelta:
    """
    Parse an expiry such as "24h", "30m", "7d" or "3600" (seconds).

    Raises:
        ValueError: If the value is not a recognised duration
    """
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _DURATION_UNITS[unit])


def get_jwt_secret() -> str:
    """
    Return the signing secret.

    Raises:
        RuntimeError: If JWT_SECRET is not set in production
    """
    if JWT_SECRET:
        return JWT_SECRET
    if is_production():
        raise RuntimeError(
            "JWT_SECRET must be set in production. "
            "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
        )
    logger.warning(
        "JWT_SECRET not set - using an insecure development secret. "
        "Set JWT_SECRET environment variable for security."
    )
    return _DEV_SECRET


def create_access_token(user_id: int, username: str, role: str) -> str:
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "userId": user_id,
        "username": username,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + parse_duration(JWT_EXPIRES_IN)).timestamp()),
    }
    return jwt.encode(payload, get_jwt_secret(), algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry, returning the payload.

    Raises:
        jwt.InvalidTokenError: If the token is malformed, forged or expired
    """
    return jwt.decode(
        token,
        get_jwt_secret(),
        algorithms=[JWT_ALGORITHM],
        options={"require": ["exp", "iat"]},
    )
