from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from app.auth.identity import Identity
from app.core.database import get_db
from app.dependencies.admin import require_admin
from app.models.application import Application, ApplicationStatus
from app.models.job import Job, JobStatus
from app.routes.jobs import jobs_to_out
from app.schemas.job import AdminStatsOut, JobCreate, JobOut, JobStatusUpdate
from app.services.jobs import get_job_or_404, parse_custom_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

RECENT_JOBS_LIMIT = 5
REQUIRED_JOB_FIELDS = ("title", "department", "location", "description")


@router.post("/jobs/", response_model=JobOut, status_code=status.HTTP_201_CREATED)
def create_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    data = payload.model_dump()
    custom_fields = parse_custom_fields(data.pop("custom_fields", None))

    for k, v in list(data.items()):
        if isinstance(v, str):
            data[k] = v.strip() or None
    missing = [k for k in REQUIRED_JOB_FIELDS if not data.get(k)]
    if missing:
        raise HTTPException(status_code=400, detail=f"Missing required fields: {', '.join(missing)}")

    job = Job(**data)
    job.custom_fields = custom_fields or None
    job.status = JobStatus.ACTIVE.value
    job.created_by = admin.user_id

    db.add(job)
    db.commit()
    db.refresh(job)
    logger.info("Job created job_id=%s by=%s", job.id, admin.user_id)
    return jobs_to_out(db, [job])[0]


@router.get("/jobs/", response_model=list[JobOut])
def list_my_jobs(
    db: Session = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    jobs = (
        db.query(Job)
        .filter(Job.created_by == admin.user_id)
        .order_by(desc(Job.created_at), desc(Job.id))
        .all()
    )
    return jobs_to_out(db, jobs)


@router.get("/jobs/recent", response_model=list[JobOut])
def list_recent_jobs(
    db: Session = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    jobs = (
        db.query(Job)
        .filter(Job.created_by == admin.user_id)
        .order_by(desc(Job.created_at), desc(Job.id))
        .limit(RECENT_JOBS_LIMIT)
        .all()
    )
    return jobs_to_out(db, jobs)


@router.patch("/jobs/{job_id}/status", response_model=JobOut)
def update_job_status(
    job_id: int,
    payload: JobStatusUpdate,
    db: Session = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    job = get_job_or_404(db, job_id)
    job.status = JobStatus(payload.status.upper()).value
    db.commit()
    db.refresh(job)
    logger.info("Job status set job_id=%s status=%s by=%s", job.id, job.status, admin.user_id)
    return jobs_to_out(db, [job])[0]


@router.get("/stats", response_model=AdminStatsOut)
def get_stats(
    db: Session = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    def count_jobs(*filters) -> int:
        return int(
            db.query(func.count(Job.id)).filter(Job.created_by == admin.user_id, *filters).scalar() or 0
        )

    def count_applications(*filters) -> int:
        return int(
            db.query(func.count(Application.id))
            .join(Job, Job.id == Application.job_id)
            .filter(Job.created_by == admin.user_id, *filters)
            .scalar()
            or 0
        )

    return AdminStatsOut(
        total_jobs=count_jobs(),
        active_jobs=count_jobs(Job.status == JobStatus.ACTIVE.value),
        closed_jobs=count_jobs(Job.status == JobStatus.CLOSED.value),
        total_applications=count_applications(),
        pending_applications=count_applications(Application.status == ApplicationStatus.PENDING.value),
    )
