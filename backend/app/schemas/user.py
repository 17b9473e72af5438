from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class UserMeOut(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    role: str
    phone: Optional[str] = None
    location: Optional[str] = None
    experience: Optional[str] = None
    cover_letter: Optional[str] = None
    previous_role: Optional[str] = None
    current_company: Optional[str] = None
    expected_salary: Optional[str] = None
    availability_date: Optional[date] = None
    created_at: datetime

    @field_serializer("role")
    def serialize_role(self, role: str):
        return str(role or "").lower()

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdateIn(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=50)
    location: Optional[str] = Field(default=None, max_length=255)
    experience: Optional[str] = Field(default=None, max_length=255)
    cover_letter: Optional[str] = None
    previous_role: Optional[str] = Field(default=None, max_length=255)
    current_company: Optional[str] = Field(default=None, max_length=255)
    expected_salary: Optional[str] = Field(default=None, max_length=100)
    availability_date: Optional[date] = None
