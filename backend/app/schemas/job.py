from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class CustomFieldOut(BaseModel):
    id: str
    question: str


class JobCreate(BaseModel):
    title: str = Field(min_length=2, max_length=255)
    department: str = Field(min_length=2, max_length=255)
    location: str = Field(min_length=2, max_length=255)
    salary: Optional[str] = Field(default=None, max_length=100)
    description: str = Field(min_length=10)
    requirements: Optional[str] = None
    # A list of {id, question} objects, or the same list as a JSON string.
    custom_fields: Optional[Union[list[dict[str, Any]], str]] = None


class JobStatusUpdate(BaseModel):
    status: Literal["active", "closed", "ACTIVE", "CLOSED"]


class JobOut(BaseModel):
    id: int
    title: str
    department: str
    location: str
    salary: Optional[str] = None
    description: str
    requirements: Optional[str] = None
    custom_fields: list[CustomFieldOut] = []
    status: str
    application_count: int = 0
    created_at: datetime
    updated_at: datetime

    @field_serializer("status")
    def serialize_status(self, status: str):
        return str(status or "").lower()

    model_config = ConfigDict(from_attributes=True)


class JobSummaryOut(BaseModel):
    id: int
    title: str
    department: str
    location: str
    status: str

    @field_serializer("status")
    def serialize_status(self, status: str):
        return str(status or "").lower()

    model_config = ConfigDict(from_attributes=True)


class AdminStatsOut(BaseModel):
    total_jobs: int
    active_jobs: int
    closed_jobs: int
    total_applications: int
    pending_applications: int
