from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.auth.identity import Identity
from app.models.application_note import ApplicationNote
from app.services.applications import get_application_or_404

logger = logging.getLogger(__name__)


def add_note(
    db: Session,
    *,
    application_id: int,
    content: str | None,
    author: Identity,
) -> ApplicationNote:
    if not author.is_admin:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="Admin access required")

    application = get_application_or_404(db, application_id)

    body = (content or "").strip()
    if not body:
        raise HTTPException(status_code=400, detail="Note content is required")

    note = ApplicationNote(
        application_id=application.id,
        content=body,
        author=author.display_name,
    )
    db.add(note)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(note)

    logger.info("Note added application_id=%s note_id=%s by=%s", application.id, note.id, author.user_id)
    return note


def list_notes(db: Session, application_id: int) -> list[ApplicationNote]:
    get_application_or_404(db, application_id)

    return (
        db.query(ApplicationNote)
        .filter(ApplicationNote.application_id == application_id)
        .order_by(ApplicationNote.created_at.desc(), ApplicationNote.id.asc())
        .all()
    )
