# app/services/users.py
"""
User management helpers.

Responsibilities:
- Applicant self-registration
- Admin provisioning (scripts/create_admin.py)
- User lookup by email
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import hash_password
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Look up a user by email address."""
    return db.query(User).filter(User.email == email.strip().lower()).first()


def normalize_name(name: str | None, fallback: str) -> str:
    """Normalize name, falling back to the email local part if needed."""
    if name:
        clean = name.strip()
        if clean:
            return clean[:100]
    if fallback and "@" in fallback:
        local = fallback.split("@", 1)[0]
        if local:
            return local[:100]
    return fallback[:100]


def check_password_length(password: str) -> None:
    if len(password or "") < settings.PASSWORD_MIN_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters",
        )


def register_applicant(db: Session, *, email: str, name: str | None, password: str) -> User:
    """
    Create an applicant account. Self-service sign-up never creates admins.

    Raises:
        HTTPException(400): password too short
        HTTPException(409): email already registered
    """
    normalized_email = email.strip().lower()
    check_password_length(password)
    if get_user_by_email(db, normalized_email):
        raise HTTPException(status_code=409, detail="Email already registered")

    user = User(
        email=normalized_email,
        name=normalize_name(name, fallback=normalized_email),
        password_hash=hash_password(password),
        role=UserRole.APPLICANT.value,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("Registered applicant user_id=%s", user.id)
    return user


def ensure_admin(db: Session, *, email: str, name: str | None, password: str | None) -> User:
    """
    Create an admin account, or promote an existing user to admin.

    An existing user keeps their password unless a new one is given.

    Raises:
        ValueError: no user exists and no password was supplied, or the password is too short
    """
    normalized_email = email.strip().lower()
    if not normalized_email:
        raise ValueError("email is required")
    if password is not None and len(password) < settings.PASSWORD_MIN_LENGTH:
        raise ValueError(f"password must be at least {settings.PASSWORD_MIN_LENGTH} characters")

    user = get_user_by_email(db, normalized_email)
    if user is None:
        if not password:
            raise ValueError("password is required for a new admin")
        user = User(
            email=normalized_email,
            name=normalize_name(name, fallback=normalized_email),
            password_hash=hash_password(password),
            is_active=True,
        )
        db.add(user)
    elif password:
        user.password_hash = hash_password(password)

    user.role = UserRole.ADMIN.value
    if name and name.strip():
        user.name = name.strip()[:100]

    db.commit()
    db.refresh(user)

    logger.info("Admin provisioned user_id=%s email=%s", user.id, normalized_email)
    return user
