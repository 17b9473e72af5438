# app/auth/__init__.py
"""
Authentication modules for the hiring portal.

This package contains:
- identity.py: Canonical authenticated identity model (role-aware, ORM-free)
"""
from app.auth.identity import Identity

__all__ = ["Identity"]
