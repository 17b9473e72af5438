"""
Read-side fusion of the note ledger and the action log.

Ordering is newest first. Entries with the same timestamp keep a fixed order:
action-log entries ahead of notes, and lower ids (older inserts) first within
each ledger.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy.orm import Session

from app.models.action_log import ActionLog
from app.models.application_note import ApplicationNote
from app.services.action_log import list_action_logs
from app.services.notes import list_notes

SYSTEM_AUTHOR = "System"


@dataclass(frozen=True)
class TimelineEntry:
    id: str
    content: str
    created_at: datetime
    author: str


def _as_utc(dt: datetime | None) -> datetime:
    if dt is None:
        return datetime.min.replace(tzinfo=timezone.utc)
    # SQLite hands back naive datetimes; they are stored as UTC.
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def project_action_log(entry: ActionLog) -> TimelineEntry:
    return TimelineEntry(
        id=f"log_{entry.id}",
        content=f"Status changed to {str(entry.action).lower()}",
        created_at=_as_utc(entry.created_at),
        author=SYSTEM_AUTHOR,
    )


def project_note(note: ApplicationNote) -> TimelineEntry:
    return TimelineEntry(
        id=f"note_{note.id}",
        content=note.content,
        created_at=_as_utc(note.created_at),
        author=note.author,
    )


def merge_timeline(
    notes: Iterable[ApplicationNote],
    action_logs: Iterable[ActionLog],
) -> list[TimelineEntry]:
    projected = [project_action_log(e) for e in sorted(action_logs, key=lambda e: e.id)]
    projected += [project_note(n) for n in sorted(notes, key=lambda n: n.id)]
    # sorted() is stable, so equal timestamps keep the order built above.
    return sorted(projected, key=lambda e: e.created_at, reverse=True)


def merged_timeline(db: Session, application_id: int) -> list[TimelineEntry]:
    notes = list_notes(db, application_id)
    return merge_timeline(notes, list_action_logs(db, application_id))
