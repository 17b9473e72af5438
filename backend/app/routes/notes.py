from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.auth.identity import Identity
from app.core.database import get_db
from app.dependencies.admin import require_admin
from app.schemas.application_note import NoteCreate, NoteOut
from app.services.notes import add_note, list_notes

router = APIRouter(prefix="/admin/applications", tags=["notes"], dependencies=[Depends(require_admin)])


@router.post("/{application_id}/notes", response_model=NoteOut, status_code=status.HTTP_201_CREATED)
def create_note(
    application_id: int,
    payload: NoteCreate,
    db: Session = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    return add_note(db, application_id=application_id, content=payload.content, author=admin)


@router.get("/{application_id}/notes", response_model=list[NoteOut])
def get_notes(application_id: int, db: Session = Depends(get_db)):
    return list_notes(db, application_id)
