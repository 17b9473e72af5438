from __future__ import annotations

import math
import re

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import desc, or_
from sqlalchemy.orm import Session, joinedload

from app.auth.identity import Identity
from app.core.database import get_db
from app.dependencies.admin import require_admin
from app.models.application import Application
from app.models.job import Job
from app.models.user import User
from app.schemas.application import (
    AdminApplicationListOut,
    ApplicationDetailOut,
    ResumeDownloadOut,
    StatusUpdateIn,
    StatusUpdateOut,
)
from app.schemas.application_note import TimelineEntryOut
from app.services import storage
from app.services.applications import build_custom_responses, get_application_or_404
from app.services.timeline import merged_timeline
from app.services.workflow import apply_status_change, parse_status

router = APIRouter(
    prefix="/admin/applications",
    tags=["admin-applications"],
    dependencies=[Depends(require_admin)],
)

UNKNOWN_CANDIDATE = "Unknown"
NOT_SPECIFIED = "Not specified"


def _presign_or_502(key: str | None) -> str | None:
    if not key:
        return None
    try:
        return storage.presign_download(key)
    except storage.StorageError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


def _list_item(application: Application) -> dict:
    user = application.user
    job = application.job
    return {
        "id": application.id,
        "job_id": application.job_id,
        "job_title": job.title if job else "",
        "candidate_name": (user.name if user else None) or UNKNOWN_CANDIDATE,
        "candidate_email": (user.email if user else None) or "",
        "applied_at": application.created_at,
        "status": application.status,
        "experience": (user.experience if user else None) or NOT_SPECIFIED,
        "location": (user.location if user else None) or (job.location if job else None) or NOT_SPECIFIED,
        "has_resume": bool(application.resume_key),
    }


@router.get("/", response_model=AdminApplicationListOut)
def list_applications(
    status: str = "all",
    job_id: int | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    q = (
        db.query(Application)
        .join(Job, Job.id == Application.job_id)
        .join(User, User.id == Application.user_id)
        .options(joinedload(Application.user), joinedload(Application.job))
        .filter(Job.created_by == admin.user_id)
    )

    if status and status.strip().lower() != "all":
        q = q.filter(Application.status == parse_status(status).value)
    if job_id is not None:
        q = q.filter(Application.job_id == job_id)
    term = (search or "").strip()
    if term:
        like = f"%{term}%"
        q = q.filter(or_(User.name.ilike(like), User.email.ilike(like), Job.title.ilike(like)))

    total = q.count()
    rows = (
        q.order_by(desc(Application.created_at), desc(Application.id))
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "applications": [_list_item(a) for a in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if total else 0,
        },
    }


@router.get("/{application_id}", response_model=ApplicationDetailOut)
def get_application_detail(application_id: int, db: Session = Depends(get_db)):
    application = get_application_or_404(db, application_id)
    user = application.user
    job = application.job

    return {
        "id": application.id,
        "job_id": application.job_id,
        "job_title": job.title if job else "",
        "job_department": job.department if job else "",
        "candidate_name": (user.name if user else None) or UNKNOWN_CANDIDATE,
        "candidate_email": (user.email if user else None) or "",
        "candidate_phone": user.phone if user else None,
        "candidate_location": (user.location if user else None) or (job.location if job else None) or NOT_SPECIFIED,
        "applied_at": application.created_at,
        "status": application.status,
        "resume": _presign_or_502(application.resume_key),
        "resume_preview_url": _presign_or_502(application.resume_preview_key),
        "cover_letter": user.cover_letter if user else None,
        "experience": (user.experience if user else None) or NOT_SPECIFIED,
        "previous_role": user.previous_role if user else None,
        "current_company": user.current_company if user else None,
        "expected_salary": user.expected_salary if user else None,
        "availability_date": user.availability_date if user else None,
        "custom_responses": build_custom_responses(application),
        "notes": [TimelineEntryOut.model_validate(e) for e in merged_timeline(db, application.id)],
    }


@router.patch("/{application_id}/status", response_model=StatusUpdateOut)
def update_status(
    application_id: int,
    payload: StatusUpdateIn,
    db: Session = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    new_status = apply_status_change(
        db,
        application_id=application_id,
        new_status=payload.status,
        actor=admin,
    )
    return {"id": application_id, "status": new_status.value}


@router.get("/{application_id}/resume", response_model=ResumeDownloadOut)
def get_resume_download(application_id: int, db: Session = Depends(get_db)):
    application = get_application_or_404(db, application_id)
    if not application.resume_key:
        raise HTTPException(status_code=404, detail="Resume not found")

    name = (application.user.name if application.user else None) or "Candidate"
    safe_name = re.sub(r"[^A-Za-z0-9]+", "_", name).strip("_") or "Candidate"
    return {
        "download_url": _presign_or_502(application.resume_key),
        "filename": f"{safe_name}_Resume.pdf",
    }
