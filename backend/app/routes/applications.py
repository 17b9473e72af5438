from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from sqlalchemy.orm import Session

from app.auth.identity import Identity
from app.core.config import settings
from app.core.database import get_db
from app.core.rate_limit import limiter
from app.dependencies.auth import require_applicant
from app.schemas.application import ApplicationCheckOut, ApplicationSubmitOut
from app.services.applications import (
    ResumeUpload,
    find_application,
    parse_answers,
    submit_application,
)

router = APIRouter(prefix="/applications", tags=["applications"])


def _maybe_limit(rule: str):
    if not settings.ENABLE_RATE_LIMITING:
        def passthrough(fn):
            return fn
        return passthrough
    return limiter.limit(rule)


def _read_upload(upload: UploadFile | None) -> ResumeUpload | None:
    if upload is None:
        return None
    content = upload.file.read()
    return ResumeUpload(filename=upload.filename, content_type=upload.content_type, content=content)


@router.post("/", response_model=ApplicationSubmitOut, status_code=status.HTTP_201_CREATED)
@_maybe_limit("5/minute")
def submit(
    request: Request,
    job_id: int = Form(...),
    answers: str | None = Form(None),
    resume: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    applicant: Identity = Depends(require_applicant),
):
    application = submit_application(
        db,
        job_id=job_id,
        applicant=applicant,
        answers=parse_answers(answers),
        resume=_read_upload(resume),
    )
    return {"message": "Application submitted successfully", "application": application}


@router.get("/check/{job_id}", response_model=ApplicationCheckOut)
def check_applied(
    job_id: int,
    db: Session = Depends(get_db),
    applicant: Identity = Depends(require_applicant),
):
    return {"application": find_application(db, applicant.user_id, job_id)}
