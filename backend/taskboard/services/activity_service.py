"""Team activity log: append-only record of task lifecycle changes."""

from typing import List, Optional

from sqlalchemy.orm import Session

from taskboard.config import settings
from taskboard.models.team import ActivityLogEntry

CREATED_TASK = "created_task"
EDITED_TASK = "edited_task"
UPDATED_TASK_STATUS = "updated_task_status"
DELETED_TASK = "deleted_task"

ACTIONS = (CREATED_TASK, EDITED_TASK, UPDATED_TASK_STATUS, DELETED_TASK)


def build_entry(
    team_id: int,
    actor_email: str,
    action: str,
    target: str,
    destination: Optional[str] = None,
) -> ActivityLogEntry:
    if action not in ACTIONS:
        raise ValueError(f"unknown activity action: {action}")
    return ActivityLogEntry(
        team_id=team_id,
        actor_email=actor_email,
        action=action,
        target=target,
        destination=destination,
    )


def record(
    db: Session,
    team_id: int,
    actor_email: str,
    action: str,
    target: str,
    destination: Optional[str] = None,
) -> ActivityLogEntry:
    entry = build_entry(team_id, actor_email, action, target, destination)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def list_recent(db: Session, team_id: int, limit: Optional[int] = None) -> List[ActivityLogEntry]:
    return (
        db.query(ActivityLogEntry)
        .filter(ActivityLogEntry.team_id == team_id)
        .order_by(ActivityLogEntry.created_at.desc(), ActivityLogEntry.id.desc())
        .limit(limit or settings.ACTIVITY_LOG_LIMIT)
        .all()
    )


def to_event(entry: ActivityLogEntry, task_id: Optional[int] = None) -> dict:
    """Payload of the ``new_activity`` broadcast for one log entry."""
    return {
        "id": entry.id,
        "team_id": entry.team_id,
        "task_id": task_id,
        "actor_email": entry.actor_email,
        "action": entry.action,
        "target": entry.target,
        "destination": entry.destination,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }
