from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import desc
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.job import Job, JobStatus
from app.schemas.job import JobOut
from app.services.jobs import application_counts, coerce_custom_fields, get_active_job_or_404

router = APIRouter(prefix="/jobs", tags=["jobs"])


def job_to_out(job: Job, application_count: int = 0) -> JobOut:
    fields = [
        {"id": str(f.get("id") or ""), "question": str(f.get("question") or f.get("label") or "")}
        for f in coerce_custom_fields(job.custom_fields)
    ]
    return JobOut.model_validate(
        {
            "id": job.id,
            "title": job.title,
            "department": job.department,
            "location": job.location,
            "salary": job.salary,
            "description": job.description,
            "requirements": job.requirements,
            "custom_fields": fields,
            "status": job.status,
            "application_count": application_count,
            "created_at": job.created_at,
            "updated_at": job.updated_at,
        }
    )


def jobs_to_out(db: Session, jobs: list[Job]) -> list[JobOut]:
    counts = application_counts(db, [j.id for j in jobs])
    return [job_to_out(j, counts.get(j.id, 0)) for j in jobs]


@router.get("/", response_model=list[JobOut])
def list_active_jobs(db: Session = Depends(get_db)):
    jobs = (
        db.query(Job)
        .filter(Job.status == JobStatus.ACTIVE.value)
        .order_by(desc(Job.created_at), desc(Job.id))
        .all()
    )
    return jobs_to_out(db, jobs)


@router.get("/{job_id}", response_model=JobOut)
def get_active_job(job_id: int, db: Session = Depends(get_db)):
    job = get_active_job_or_404(db, job_id)
    return jobs_to_out(db, [job])[0]
