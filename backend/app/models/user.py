# app/models/user.py
from enum import Enum

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String, Text, func
from sqlalchemy.orm import relationship

from app.core.base import Base


class UserRole(str, Enum):
    APPLICANT = "APPLICANT"
    ADMIN = "ADMIN"

    def __str__(self) -> str:
        return self.value


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=True)
    password_hash = Column(String(255), nullable=False)

    # APPLICANT | ADMIN
    role = Column(String(20), nullable=False, server_default=UserRole.APPLICANT.value, index=True)
    is_active = Column(Boolean, nullable=False, server_default="true")

    # Candidate profile (shown to reviewers on the application detail page)
    phone = Column(String(50), nullable=True)
    location = Column(String(255), nullable=True)
    experience = Column(String(255), nullable=True)
    cover_letter = Column(Text, nullable=True)
    previous_role = Column(String(255), nullable=True)
    current_company = Column(String(255), nullable=True)
    expected_salary = Column(String(100), nullable=True)
    availability_date = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    applications = relationship(
        "Application",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def is_admin(self) -> bool:
        return str(self.role or "").upper() == UserRole.ADMIN.value
