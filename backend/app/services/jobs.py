from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.application import Application
from app.models.job import Job, JobStatus

logger = logging.getLogger(__name__)


def get_job_or_404(db: Session, job_id: int) -> Job:
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


def get_active_job_or_404(db: Session, job_id: int) -> Job:
    job = db.query(Job).filter(Job.id == job_id, Job.status == JobStatus.ACTIVE.value).first()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found or not active")
    return job


def parse_custom_fields(raw: Any) -> list[dict[str, str]]:
    """
    Validate admin input for custom questions. Accepts a list or a JSON string.
    Each entry needs a question (``question`` or ``label``); ``id`` falls back to ``name``
    and then to a positional id.
    """
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON in custom fields")
    if not isinstance(raw, list):
        raise HTTPException(status_code=400, detail="Custom fields must be a list")

    fields: list[dict[str, str]] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise HTTPException(status_code=400, detail="Each custom field must be an object")
        question = str(item.get("question") or item.get("label") or "").strip()
        if not question:
            raise HTTPException(status_code=400, detail="Each custom field needs a question")
        field_id = str(item.get("id") or item.get("name") or f"q{i + 1}").strip()
        fields.append({"id": field_id, "question": question})
    return fields


def coerce_custom_fields(raw: Any) -> list[dict[str, Any]]:
    """Read-side counterpart of parse_custom_fields: malformed rows become []."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring unparsable custom_fields value")
            return []
    if not isinstance(raw, list):
        return []
    return [f for f in raw if isinstance(f, dict)]


def application_counts(db: Session, job_ids: list[int]) -> dict[int, int]:
    if not job_ids:
        return {}
    rows = (
        db.query(Application.job_id, func.count(Application.id))
        .filter(Application.job_id.in_(job_ids))
        .group_by(Application.job_id)
        .all()
    )
    return {job_id: int(count) for job_id, count in rows}
