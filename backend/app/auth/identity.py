# app/auth/identity.py
"""
Canonical authenticated identity model.

Downstream code (workflow services, audit logging) reasons about "who is
calling and in which role?" through this object instead of the ORM ``User``.

The Identity object is INTERNAL ONLY and should not be returned directly
to clients.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from app.models.user import User, UserRole

DEFAULT_AUTHOR_NAME = "Admin"


def resolve_display_name(name: str | None, email: str | None, fallback: str = DEFAULT_AUTHOR_NAME) -> str:
    """Display name → email → literal fallback, first non-blank wins."""
    for candidate in (name, email):
        if candidate and str(candidate).strip():
            return str(candidate).strip()
    return fallback


@dataclass(frozen=True)
class Identity:
    """
    Canonical representation of an authenticated (or unauthenticated) caller.

    Attributes:
        user_id: Internal application user ID.
        email: Normalized email address.
        name: Display name, if the user set one.
        role: ``"APPLICANT"`` or ``"ADMIN"`` (``None`` if unauthenticated).
        is_authenticated: True if the caller presented a valid token.
    """

    user_id: int | None = None
    email: str | None = None
    name: str | None = None
    role: str | None = None
    is_authenticated: bool = False

    @classmethod
    def unauthenticated(cls) -> Identity:
        """Create an identity representing an unauthenticated request."""
        return cls()

    @classmethod
    def from_user(cls, user: User) -> Identity:
        return cls(
            user_id=user.id,
            email=user.email.strip().lower() if user.email else None,
            name=user.name,
            role=str(user.role or UserRole.APPLICANT.value).upper(),
            is_authenticated=True,
        )

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.role == UserRole.ADMIN.value

    @property
    def is_applicant(self) -> bool:
        return self.is_authenticated and self.role == UserRole.APPLICANT.value

    @property
    def display_name(self) -> str:
        return resolve_display_name(self.name, self.email)

    def to_debug_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "role": self.role,
            "is_authenticated": self.is_authenticated,
        }
