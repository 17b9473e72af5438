from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from app.models.action_log import ActionLog


def log_application_action(
    db: Session,
    *,
    application_id: int,
    action: str,
    performed_by: Optional[int],
) -> ActionLog:
    entry = ActionLog(
        application_id=application_id,
        action=str(action).upper(),
        performed_by=performed_by,
    )
    db.add(entry)
    # Caller owns the commit; flush so `id` is available.
    db.flush()
    return entry


def list_action_logs(db: Session, application_id: int) -> list[ActionLog]:
    return (
        db.query(ActionLog)
        .filter(ActionLog.application_id == application_id)
        .order_by(ActionLog.created_at.desc(), ActionLog.id.asc())
        .all()
    )
