from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies.admin import require_admin
from app.schemas.application_note import TimelineEntryOut
from app.services.timeline import merged_timeline


router = APIRouter(prefix="/admin/applications", tags=["activity"], dependencies=[Depends(require_admin)])


@router.get("/{application_id}/timeline", response_model=list[TimelineEntryOut])
def get_timeline(application_id: int, db: Session = Depends(get_db)):
    return [TimelineEntryOut.model_validate(e) for e in merged_timeline(db, application_id)]
