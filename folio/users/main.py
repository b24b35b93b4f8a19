"""
Users API

Registration, login and the authenticated user's profile.
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from folio.shared.auth import CurrentUser, get_current_user
from folio.shared.database import get_db
from folio.shared.schemas import ApiResponse
from folio.shared.security import create_access_token, hash_password, verify_password
from folio.users.models import Role, User
from folio.users.schemas import (
    AuthResult,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def _issue_token(user: User) -> str:
    return create_access_token(user.id, user.username, user.role.value)


@router.post("/register", response_model=ApiResponse[AuthResult], status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account and return it with a fresh access token."""
    username = payload.username.lower()
    email = payload.email.lower()

    existing = (
        db.query(User)
        .filter(or_(func.lower(User.username) == username, func.lower(User.email) == email))
        .all()
    )
    if existing:
        # Username conflicts are reported before email conflicts
        if any(u.username.lower() == username for u in existing):
            raise HTTPException(status_code=400, detail="Username already exists")
        raise HTTPException(status_code=400, detail="Email already exists")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(payload.password),
        first_name=payload.first_name or None,
        last_name=payload.last_name or None,
        bio=payload.bio or None,
        avatar=payload.avatar or None,
        role=Role.USER,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"Registered user {user.username} (id={user.id})")

    return ApiResponse(
        data=AuthResult(user=UserResponse.model_validate(user), token=_issue_token(user)),
        message="User registered successfully",
    )


@router.post("/login", response_model=ApiResponse[AuthResult])
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    """
    Exchange username and password for an access token.

    Unknown users and wrong passwords get the same response.
    """
    user = (
        db.query(User)
        .filter(func.lower(User.username) == payload.username.lower(), User.is_active.is_(True))
        .first()
    )

    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    logger.info(f"User {user.username} logged in")

    return ApiResponse(
        data=AuthResult(user=UserResponse.model_validate(user), token=_issue_token(user)),
        message="Login successful",
    )


@router.get("/profile", response_model=ApiResponse[UserResponse])
def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Return the authenticated user's record."""
    user = db.get(User, current_user.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return ApiResponse(data=UserResponse.model_validate(user))


@router.put("/profile", response_model=ApiResponse[UserResponse])
def update_profile(
    payload: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update profile fields. Only fields present in the body change."""
    user = db.get(User, current_user.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(user, key, value)

    db.commit()
    db.refresh(user)
    return ApiResponse(data=UserResponse.model_validate(user), message="Profile updated successfully")
