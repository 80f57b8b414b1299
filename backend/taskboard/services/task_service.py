"""Task store for both owner scopes. Encapsulates validation, persistence and mutation side effects."""

import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from taskboard.models.task import Task, TASK_STATUSES, COMPLETE, INCOMPLETE, OVERDUE
from taskboard.services import statistics_service, sweep_service
from taskboard.services.scope import OwnerScope
from taskboard.utils import helpers

logger = logging.getLogger(__name__)


def validate_task_name(task_name: Optional[str]) -> str:
    if not isinstance(task_name, str) or not task_name.strip():
        raise HTTPException(status_code=400, detail="Invalid task title")
    return task_name.strip()


def validate_status(status: Optional[str]) -> str:
    if status == OVERDUE:
        raise HTTPException(status_code=400, detail="Overdue status is set automatically and cannot be chosen")
    if status not in TASK_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")
    return status


def apply_status(task: Task, status: str) -> None:
    if status == COMPLETE and task.status != COMPLETE:
        task.date_completed = datetime.utcnow()
    elif status != COMPLETE:
        task.date_completed = None
    task.status = status


def after_mutation(db: Session, scope: OwnerScope) -> None:
    sweep_service.sweep(db, scope)
    if not scope.is_team:
        statistics_service.refresh_user_stats(db, scope.email)


def _duplicate_name() -> HTTPException:
    return HTTPException(status_code=409, detail="A task with this name already exists")


def find_task(db: Session, scope: OwnerScope, task_name: str) -> Task:
    task = db.query(Task).filter(*scope.criteria(), Task.task_name == task_name).first()
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


def list_tasks(db: Session, scope: OwnerScope) -> List[Task]:
    sweep_service.sweep(db, scope)
    return (
        db.query(Task)
        .options(selectinload(Task.assignees))
        .filter(*scope.criteria())
        .order_by(Task.date_created.desc(), Task.id.desc())
        .all()
    )


def list_due_today(db: Session, scope: OwnerScope) -> List[Task]:
    sweep_service.sweep(db, scope)
    return (
        db.query(Task)
        .filter(*scope.criteria(), Task.due_date == helpers.today_local())
        .order_by(Task.date_created.desc(), Task.id.desc())
        .all()
    )


def list_between(db: Session, scope: OwnerScope, start: date, end: date) -> List[Task]:
    sweep_service.sweep(db, scope)
    return (
        db.query(Task)
        .options(selectinload(Task.assignees))
        .filter(*scope.criteria(), Task.due_date >= start, Task.due_date < end)
        .order_by(Task.due_date, Task.id)
        .all()
    )


def build_task(
    scope: OwnerScope,
    task_name: Optional[str],
    due_date: Optional[date] = None,
    description: Optional[str] = None,
    assigned_by: Optional[str] = None,
) -> Task:
    return Task(
        task_name=validate_task_name(task_name),
        status=INCOMPLETE,
        due_date=due_date,
        description=description or None,
        assigned_by=assigned_by,
        **scope.owner_fields(),
    )


def create_task(
    db: Session,
    scope: OwnerScope,
    task_name: Optional[str],
    due_date: Optional[date] = None,
    description: Optional[str] = None,
) -> Task:
    task = build_task(scope, task_name, due_date, description)
    db.add(task)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _duplicate_name()
    db.refresh(task)
    logger.info("[tasks] %s created '%s'", scope, task.task_name)
    after_mutation(db, scope)
    db.refresh(task)
    return task


def update_status(db: Session, scope: OwnerScope, task_name: str, status: Optional[str]) -> Task:
    status = validate_status(status)
    task = find_task(db, scope, task_name)
    apply_status(task, status)
    db.commit()
    db.refresh(task)
    after_mutation(db, scope)
    db.refresh(task)
    return task


def edit_task(
    db: Session,
    scope: OwnerScope,
    original_name: str,
    updates: dict,
) -> Task:
    """Rename, reschedule or redescribe a task.

    ``updates`` holds only the fields the caller actually sent (``new_name``,
    ``due_date``, ``description``). An overdue task whose fields change goes
    back to ``incomplete``; any other status is kept.
    """
    task = find_task(db, scope, original_name)

    changed = False
    if "new_name" in updates and updates["new_name"] is not None:
        new_name = validate_task_name(updates["new_name"])
        if new_name != task.task_name:
            task.task_name = new_name
            changed = True
    if "due_date" in updates and updates["due_date"] != task.due_date:
        task.due_date = updates["due_date"]
        changed = True
    if "description" in updates:
        description = updates["description"] or None
        if description != task.description:
            task.description = description
            changed = True

    if changed and task.status == OVERDUE:
        task.status = INCOMPLETE

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _duplicate_name()
    db.refresh(task)
    after_mutation(db, scope)
    db.refresh(task)
    return task


def delete_task(db: Session, scope: OwnerScope, task_name: str) -> dict:
    task = find_task(db, scope, task_name)
    deleted = {"id": task.id, "task_name": task.task_name}
    db.delete(task)
    db.commit()
    logger.info("[tasks] %s deleted '%s'", scope, task_name)
    after_mutation(db, scope)
    return deleted
