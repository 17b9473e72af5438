from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.auth.identity import Identity
from app.core.config import settings
from app.models.action_log import APPLIED_ACTION
from app.models.application import Application, ApplicationStatus
from app.services import storage
from app.services.action_log import log_application_action
from app.services.jobs import coerce_custom_fields, get_active_job_or_404

logger = logging.getLogger(__name__)

NO_ANSWER = "No answer provided"
DUPLICATE_APPLICATION = "You have already applied to this job"


@dataclass(frozen=True)
class ResumeUpload:
    filename: str | None
    content_type: str | None
    content: bytes


def get_application_or_404(db: Session, application_id: int) -> Application:
    application = db.query(Application).filter(Application.id == application_id).first()
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    return application


def find_application(db: Session, user_id: int, job_id: int) -> Optional[Application]:
    return (
        db.query(Application)
        .filter(Application.user_id == user_id, Application.job_id == job_id)
        .first()
    )


def parse_answers(raw: str | None) -> dict[str, str]:
    """Decode the multipart ``answers`` field (a JSON object of question id → answer)."""
    if raw is None or not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="answers must be a JSON object")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="answers must be a JSON object")
    return {str(k): "" if v is None else str(v) for k, v in data.items()}


def coerce_answers(raw: Any) -> dict[str, Any]:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring unparsable answers value")
            return {}
    return raw if isinstance(raw, dict) else {}


def build_custom_responses(application: Application) -> list[dict[str, str]] | None:
    """Pair each job question with the candidate's answer (keyed by field id, then name)."""
    answers = coerce_answers(application.answers)
    fields = coerce_custom_fields(application.job.custom_fields if application.job else None)
    if not answers or not fields:
        return None

    responses: list[dict[str, str]] = []
    for field in fields:
        question = field.get("question") or field.get("label")
        if not question:
            continue
        answer = answers.get(str(field.get("id"))) or answers.get(str(field.get("name"))) or NO_ANSWER
        responses.append({"question": str(question), "answer": str(answer)})
    return responses


def validate_resume(resume: ResumeUpload | None) -> ResumeUpload | None:
    # An empty file part means "no resume attached".
    if resume is None or not resume.content:
        return None
    content_type = (resume.content_type or "").split(";")[0].strip().lower()
    if content_type != storage.RESUME_CONTENT_TYPE:
        raise HTTPException(status_code=400, detail="Only PDF files are allowed")
    if len(resume.content) > settings.MAX_RESUME_BYTES:
        max_mb = settings.MAX_RESUME_BYTES / (1024 * 1024)
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Max allowed size is {max_mb:.1f} MB.",
        )
    return resume


def submit_application(
    db: Session,
    *,
    job_id: int,
    applicant: Identity,
    answers: dict[str, str] | None,
    resume: ResumeUpload | None,
) -> Application:
    if not applicant.is_applicant:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="Applicant access required")

    job = get_active_job_or_404(db, job_id)

    if find_application(db, applicant.user_id, job.id):
        raise HTTPException(status_code=409, detail=DUPLICATE_APPLICATION)

    resume = validate_resume(resume)

    stored: storage.StoredResume | None = None
    if resume is not None:
        try:
            stored = storage.store_resume(applicant.user_id, resume.content, storage.RESUME_CONTENT_TYPE)
        except storage.StorageError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc

    application = Application(
        job_id=job.id,
        user_id=applicant.user_id,
        status=ApplicationStatus.PENDING.value,
        answers=answers or None,
        resume_key=stored.key if stored else None,
        resume_preview_key=stored.preview_key if stored else None,
    )
    try:
        db.add(application)
        db.flush()
        log_application_action(
            db,
            application_id=application.id,
            action=APPLIED_ACTION,
            performed_by=applicant.user_id,
        )
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        _discard_stored(stored)
        # Lost a race against a concurrent submission for the same (user, job).
        if _is_duplicate_application(exc):
            raise HTTPException(status_code=409, detail=DUPLICATE_APPLICATION) from exc
        raise
    except Exception:
        db.rollback()
        _discard_stored(stored)
        raise

    db.refresh(application)
    logger.info(
        "Application submitted application_id=%s job_id=%s user_id=%s resume=%s",
        application.id,
        job.id,
        applicant.user_id,
        bool(stored),
    )
    return application


def _is_duplicate_application(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == "23505":
        return True
    message = str(orig or exc)
    return (
        "uq_applications_user_id_job_id" in message
        or "UNIQUE constraint failed: applications.user_id, applications.job_id" in message
    )


def _discard_stored(stored: storage.StoredResume | None) -> None:
    if stored is None:
        return
    storage.delete_quietly(stored.key)
    storage.delete_quietly(stored.preview_key)
