# app/routes/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import create_access_token, verify_password
from app.models.user import UserRole
from app.schemas.auth import LoginIn, MessageOut, RegisterIn, TokenOut
from app.services.users import get_user_by_email, register_applicant

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    register_applicant(db, email=payload.email, name=payload.name, password=payload.password)
    return {"message": "Registration successful"}


@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    user = get_user_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User is inactive")

    role = str(user.role or UserRole.APPLICANT.value).upper()
    return {
        "access_token": create_access_token(subject=user.email, role=role),
        "token_type": "bearer",
        "role": role.lower(),
    }
