"""
Application status workflow.

Every status change goes through ``apply_status_change``; whether a move is
permitted is decided in one place, ``is_transition_allowed``.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.auth.identity import Identity
from app.models.application import ApplicationStatus
from app.services.action_log import log_application_action
from app.services.applications import get_application_or_404

logger = logging.getLogger(__name__)

STATUS_CHOICES = ", ".join(s.display for s in ApplicationStatus)


def parse_status(raw: str | None) -> ApplicationStatus:
    """Accepts the display form (``on_hold``) or the stored token (``ON_HOLD``)."""
    token = str(raw or "").strip().upper()
    try:
        return ApplicationStatus(token)
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status '{raw}'. Expected one of: {STATUS_CHOICES}",
        )


def is_transition_allowed(current: ApplicationStatus | None, new: ApplicationStatus) -> bool:
    # Any status may move to any other, including itself.
    return True


def apply_status_change(
    db: Session,
    *,
    application_id: int,
    new_status: str,
    actor: Identity,
) -> ApplicationStatus:
    if not actor.is_admin:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="Admin access required")

    application = get_application_or_404(db, application_id)
    target = parse_status(new_status)

    try:
        current = ApplicationStatus(str(application.status or "").upper())
    except ValueError:
        current = None
    if not is_transition_allowed(current, target):
        raise HTTPException(
            status_code=409,
            detail=f"Cannot move application from {current.display if current else 'unknown'} to {target.display}",
        )

    try:
        application.status = target.value
        application.updated_at = datetime.now(timezone.utc)
        log_application_action(
            db,
            application_id=application.id,
            action=target.value,
            performed_by=actor.user_id,
        )
        db.commit()
    except Exception:
        # Status and its audit row land together or not at all.
        db.rollback()
        raise

    logger.info(
        "Application status changed application_id=%s from=%s to=%s by=%s",
        application.id,
        current.value if current else None,
        target.value,
        actor.user_id,
    )
    return target
