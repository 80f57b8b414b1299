"""Team task board service.

Wraps the shared task store with team permissions, assignee rows and the
activity log. Every mutation returns the activity entry it wrote so the caller
can broadcast it to the team room once the response is on its way.
"""

import logging
from typing import List, Tuple

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from taskboard.models.task import Task, TaskAssignee
from taskboard.models.team import ActivityLogEntry, TeamMembership
from taskboard.schemas.task import AssigneeStatusUpdate, TaskEdit, TaskStatusUpdate, TeamTaskCreate
from taskboard.schemas.user import Identity
from taskboard.services import activity_service, task_service
from taskboard.services.scope import OwnerScope
from taskboard.utils.helpers import normalize_email
from taskboard.utils.permissions import require_membership, require_team_admin

logger = logging.getLogger(__name__)


def _normalize_assignees(emails: List[str]) -> List[str]:
    seen = []
    for email in emails or []:
        cleaned = normalize_email(email)
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


def _validate_assignees(db: Session, team_id: int, emails: List[str]) -> None:
    if not emails:
        return
    members = {
        row[0]
        for row in db.query(TeamMembership.email).filter(TeamMembership.team_id == team_id).all()
    }
    outsiders = [email for email in emails if email not in members]
    if outsiders:
        raise HTTPException(
            status_code=400,
            detail=f"Assignees must be team members: {', '.join(outsiders)}",
        )


def _add_assignee(db: Session, task: Task, email: str) -> TaskAssignee:
    assignee = TaskAssignee(task_id=task.id, email=email, completed=False)
    db.add(assignee)
    db.flush()
    return assignee


def list_team_tasks(db: Session, team_id: int, user: Identity) -> List[Task]:
    require_membership(db, team_id, user.email)
    return task_service.list_tasks(db, OwnerScope.team(team_id))


def create_team_task(db: Session, data: TeamTaskCreate, user: Identity) -> Tuple[Task, ActivityLogEntry]:
    require_team_admin(db, data.team_id, user.email)
    scope = OwnerScope.team(data.team_id)
    assignees = _normalize_assignees(data.assigned_to)
    _validate_assignees(db, data.team_id, assignees)
    task = task_service.build_task(scope, data.task_name, data.due_date, data.description, assigned_by=user.email)

    # Task, assignee rows and the activity entry commit together or not at all.
    db.add(task)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="A task with this name already exists")

    try:
        for email in assignees:
            _add_assignee(db, task, email)
        entry = activity_service.build_entry(data.team_id, user.email, activity_service.CREATED_TASK, task.task_name)
        db.add(entry)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("[tasks] team %s: creating '%s' failed, rolled back", data.team_id, data.task_name)
        raise HTTPException(status_code=500, detail="Failed to create task")

    db.refresh(task)
    db.refresh(entry)
    logger.info("[tasks] team %s: %s created '%s' for %d assignee(s)", data.team_id, user.email, task.task_name, len(assignees))
    task_service.after_mutation(db, scope)
    db.refresh(task)
    return task, entry


def update_team_task_status(
    db: Session, team_id: int, data: TaskStatusUpdate, user: Identity
) -> Tuple[Task, ActivityLogEntry]:
    require_team_admin(db, team_id, user.email)
    status = task_service.validate_status(data.status)
    task = task_service.update_status(db, OwnerScope.team(team_id), data.task_name, status)
    entry = activity_service.record(
        db, team_id, user.email, activity_service.UPDATED_TASK_STATUS, task.task_name, destination=status
    )
    return task, entry


def edit_team_task(
    db: Session, team_id: int, data: TaskEdit, user: Identity
) -> Tuple[Task, ActivityLogEntry]:
    require_team_admin(db, team_id, user.email)
    updates = data.model_dump(include=data.model_fields_set - {"original_name"})
    task = task_service.edit_task(db, OwnerScope.team(team_id), data.original_name, updates)
    entry = activity_service.record(db, team_id, user.email, activity_service.EDITED_TASK, task.task_name)
    return task, entry


def delete_team_task(db: Session, team_id: int, task_name: str, user: Identity) -> Tuple[dict, ActivityLogEntry]:
    require_team_admin(db, team_id, user.email)
    deleted = task_service.delete_task(db, OwnerScope.team(team_id), task_name)
    entry = activity_service.record(db, team_id, user.email, activity_service.DELETED_TASK, deleted["task_name"])
    return deleted, entry


def update_assignee_status(db: Session, team_id: int, data: AssigneeStatusUpdate, user: Identity) -> dict:
    require_membership(db, team_id, user.email)
    assignee_email = normalize_email(data.assignee_email)
    if assignee_email != user.email:
        raise HTTPException(status_code=403, detail="You can only update your own completion status")

    assignee = (
        db.query(TaskAssignee)
        .join(Task, Task.id == TaskAssignee.task_id)
        .filter(
            Task.id == data.task_id,
            Task.team_id == team_id,
            TaskAssignee.email == assignee_email,
        )
        .first()
    )
    if not assignee:
        raise HTTPException(status_code=404, detail="Assignment not found")

    assignee.completed = data.completed
    db.commit()
    return {
        "team_id": team_id,
        "task_id": data.task_id,
        "assignee_email": assignee_email,
        "completed": data.completed,
    }
