from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_serializer

from app.schemas.application_note import TimelineEntryOut
from app.schemas.job import JobSummaryOut


def _display_status(status: str) -> str:
    return str(status or "").lower()


class ApplicationOut(BaseModel):
    id: int
    job_id: int
    status: str
    created_at: datetime

    @field_serializer("status")
    def serialize_status(self, status: str):
        return _display_status(status)

    model_config = ConfigDict(from_attributes=True)


class ApplicationSubmitOut(BaseModel):
    message: str
    application: ApplicationOut


class ApplicationCheckOut(BaseModel):
    application: Optional[ApplicationOut] = None


class MyApplicationOut(ApplicationOut):
    updated_at: datetime
    job: JobSummaryOut


class StatusUpdateIn(BaseModel):
    status: str


class StatusUpdateOut(BaseModel):
    id: int
    status: str

    @field_serializer("status")
    def serialize_status(self, status: str):
        return _display_status(status)


class AdminApplicationListItem(BaseModel):
    id: int
    job_id: int
    job_title: str
    candidate_name: str
    candidate_email: str
    applied_at: datetime
    status: str
    experience: str
    location: str
    has_resume: bool

    @field_serializer("status")
    def serialize_status(self, status: str):
        return _display_status(status)


class PaginationOut(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class AdminApplicationListOut(BaseModel):
    applications: List[AdminApplicationListItem]
    pagination: PaginationOut


class CustomResponseOut(BaseModel):
    question: str
    answer: str


class ApplicationDetailOut(BaseModel):
    id: int
    job_id: int
    job_title: str
    job_department: str
    candidate_name: str
    candidate_email: str
    candidate_phone: Optional[str] = None
    candidate_location: str
    applied_at: datetime
    status: str
    resume: Optional[str] = None
    resume_preview_url: Optional[str] = None
    cover_letter: Optional[str] = None
    experience: str
    previous_role: Optional[str] = None
    current_company: Optional[str] = None
    expected_salary: Optional[str] = None
    availability_date: Optional[date] = None
    custom_responses: Optional[List[CustomResponseOut]] = None
    notes: List[TimelineEntryOut] = []

    @field_serializer("status")
    def serialize_status(self, status: str):
        return _display_status(status)


class ResumeDownloadOut(BaseModel):
    download_url: str
    filename: str
